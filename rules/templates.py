"""
Pre-built rule templates.

A template carries a ready-made rule expression plus the natural-language
description it came from. Variables name the literals inside both texts that
the user may customise before the template is used as a starting rule.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from core.exceptions import TemplateNotFoundError


class TemplateCategory(str, Enum):
    FRAUD = "Fraud Detection"
    SECURITY = "Security"
    MONITORING = "Monitoring"
    COMPLIANCE = "Compliance"
    PERFORMANCE = "Performance"


@dataclass
class TemplateVariable:
    name: str
    label: str
    type: str
    default_value: Any = None

    def to_dict(self) -> dict:
        return {"name": self.name, "label": self.label, "type": self.type, "defaultValue": self.default_value}


@dataclass
class RuleTemplate:
    id: str
    name: str
    description: str
    category: TemplateCategory
    natural_language: str
    rule_code: str
    variables: list[TemplateVariable] = field(default_factory=list)

    def matches(self, query: str) -> bool:
        query = query.lower()
        return query in self.name.lower() or query in self.description.lower()

    def to_dict(self) -> dict:
        return {
            "id": self.id, "name": self.name, "description": self.description,
            "category": self.category.value, "naturalLanguage": self.natural_language,
            "ruleCode": self.rule_code, "variables": [v.to_dict() for v in self.variables],
        }


@dataclass
class TemplateApplication:
    name: str
    natural_language: str
    rule_code: str

    def to_dict(self) -> dict:
        return {"name": self.name, "naturalLanguage": self.natural_language, "ruleCode": self.rule_code}


TEMPLATES: list[RuleTemplate] = [
    RuleTemplate(
        id="high-value-transactions", name="High Value Transaction Alert",
        description="Flag transactions that exceed a specified threshold amount",
        category=TemplateCategory.FRAUD,
        natural_language="Flag transactions where amount is greater than $1000",
        rule_code="if transaction.amount > 1000 then flag_transaction",
        variables=[TemplateVariable("threshold", "Amount Threshold", "number", 1000)],
    ),
    RuleTemplate(
        id="new-country-transactions", name="New Country Transaction",
        description="Alert on transactions from countries not previously seen for this user",
        category=TemplateCategory.FRAUD,
        natural_language="Flag transactions where user country is not in their previously seen countries",
        rule_code="if user.country not in user.previous_countries then flag_transaction",
    ),
    RuleTemplate(
        id="rapid-transactions", name="Rapid Successive Transactions",
        description="Detect multiple transactions in a short timeframe",
        category=TemplateCategory.FRAUD,
        natural_language="Flag if more than 3 transactions occur within 5 minutes",
        rule_code="if transaction.count > 3 and transaction.timeframe < 5 then flag_transaction",
        variables=[
            TemplateVariable("count", "Transaction Count", "number", 3),
            TemplateVariable("minutes", "Time Window (minutes)", "number", 5),
        ],
    ),
    RuleTemplate(
        id="high-risk-country", name="High Risk Country",
        description="Flag transactions from countries designated as high risk",
        category=TemplateCategory.COMPLIANCE,
        natural_language="Flag transactions where user country is in the high risk country list",
        rule_code='if user.country in ["Country1", "Country2", "Country3"] then flag_transaction',
        variables=[
            TemplateVariable("countries", "High Risk Countries", "array", ["Country1", "Country2", "Country3"]),
        ],
    ),
    RuleTemplate(
        id="revenue-threshold", name="Revenue Threshold Alert",
        description="Monitor when weekly revenue exceeds a specified threshold",
        category=TemplateCategory.MONITORING,
        natural_language="Alert when weekly revenue exceeds $50,000",
        rule_code="if weekly_revenue > 50000 then send_alert",
        variables=[TemplateVariable("threshold", "Revenue Threshold", "number", 50000)],
    ),
    RuleTemplate(
        id="unusual-activity", name="Unusual Activity Pattern",
        description="Detect activity patterns that deviate from user's normal behavior",
        category=TemplateCategory.SECURITY,
        natural_language="Flag if user activity level is greater than 200% of their average activity",
        rule_code="if user.activity_level > user.average_activity * 2 then flag_suspicious_activity",
        variables=[TemplateVariable("multiplier", "Activity Multiplier", "number", 2)],
    ),
    RuleTemplate(
        id="location-mismatch", name="Location Mismatch",
        description="Alert when user location doesn't match their registered address",
        category=TemplateCategory.SECURITY,
        natural_language="Flag transactions where user location state is not equal to their registered state",
        rule_code="if location.state != user.registered_state then flag_transaction",
    ),
    RuleTemplate(
        id="performance-degradation", name="Performance Degradation",
        description="Monitor for system performance issues",
        category=TemplateCategory.PERFORMANCE,
        natural_language="Alert when response time is greater than 500ms for more than 5 minutes",
        rule_code="if system.response_time > 500 and condition.duration > 5 then send_performance_alert",
        variables=[
            TemplateVariable("responseTime", "Response Time (ms)", "number", 500),
            TemplateVariable("duration", "Duration (minutes)", "number", 5),
        ],
    ),
]


def list_templates(query: str = "", category: Optional[str] = None) -> list[RuleTemplate]:
    return [
        t for t in TEMPLATES
        if t.matches(query) and (category in (None, "", "all") or t.category.value == category)
    ]


def group_by_category(templates: list[RuleTemplate]) -> dict[str, list[RuleTemplate]]:
    grouped: dict[str, list[RuleTemplate]] = {}
    for template in templates:
        grouped.setdefault(template.category.value, []).append(template)
    return grouped


def get_template(template_id: str) -> RuleTemplate:
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    raise TemplateNotFoundError(f"Template {template_id} not found")


def apply_template(template_id: str, values: Optional[dict[str, Any]] = None) -> TemplateApplication:
    """
    Substitute customised variable values into a template.

    Each variable's default literal is replaced wherever it appears in the
    rule code and the natural-language text. Variables without a supplied
    value keep their default.
    """
    template = get_template(template_id)
    values = values or {}
    code_replacements: dict[str, str] = {}
    text_replacements: dict[str, str] = {}

    for variable in template.variables:
        value = values.get(variable.name, variable.default_value)
        code_replacements[_code_literal(variable.default_value)] = _code_literal(value)
        text_replacements[_text_literal(variable.default_value)] = _text_literal(value)

    return TemplateApplication(
        name=template.name,
        natural_language=_substitute(template.natural_language, text_replacements),
        rule_code=_substitute(template.rule_code, code_replacements),
    )


def _substitute(text: str, replacements: dict[str, str]) -> str:
    # Single pass, so an inserted value is never rewritten by a later variable.
    # Digit lookarounds keep "5" from matching inside "500".
    if not replacements:
        return text
    literals = sorted(replacements, key=len, reverse=True)
    pattern = re.compile(r"(?<!\d)(?:" + "|".join(re.escape(lit) for lit in literals) + r")(?!\d)")
    return pattern.sub(lambda m: replacements[m.group(0)], text)


def _code_literal(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_code_literal(v) for v in value) + "]"
    if isinstance(value, str):
        return f'"{value}"'
    return _text_literal(value)


def _text_literal(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ", ".join(_text_literal(v) for v in value)
    return str(value)
