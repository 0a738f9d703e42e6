"""Step-by-step rule composition: builds a natural-language rule from picked options."""

from dataclasses import dataclass
from typing import Optional

from core.exceptions import InvalidRequestError

RULE_TYPES = ["Transaction", "User", "Location", "Revenue"]

SUBJECT_OPTIONS = {
    "Transaction": ["amount", "date", "type", "currency", "status"],
    "User": ["age", "country", "is_new", "registration_date", "activity_level"],
    "Location": ["state", "country", "city", "zip_code"],
    "Revenue": ["weekly_revenue", "monthly_revenue", "annual_revenue"],
}

CONDITION_OPTIONS = [
    "greater than", "less than", "equal to", "not equal to",
    "contains", "does not contain", "in", "not in",
]

ACTION_OPTIONS = ["flag", "block", "approve", "review", "select", "exclude"]


@dataclass
class WizardSelection:
    rule_type: str
    subject: str
    condition: str
    value: str
    action: Optional[str] = None

    def validate(self) -> None:
        if self.rule_type not in RULE_TYPES:
            raise InvalidRequestError(f"Unknown rule type: {self.rule_type}")
        if self.subject not in SUBJECT_OPTIONS[self.rule_type]:
            raise InvalidRequestError(f"Unknown subject for {self.rule_type}: {self.subject}")
        if self.condition not in CONDITION_OPTIONS:
            raise InvalidRequestError(f"Unknown condition: {self.condition}")
        if not str(self.value).strip():
            raise InvalidRequestError("A value is required")
        if self.action and self.action not in ACTION_OPTIONS:
            raise InvalidRequestError(f"Unknown action: {self.action}")


def compose_natural_language(selection: WizardSelection) -> str:
    selection.validate()
    rule = f"{selection.rule_type.lower()}s where {selection.subject} is {selection.condition} {selection.value}"
    if selection.action:
        rule = f"{selection.action} {rule}"
    return rule


def wizard_options() -> dict:
    return {
        "ruleTypes": RULE_TYPES,
        "subjects": SUBJECT_OPTIONS,
        "conditions": CONDITION_OPTIONS,
        "actions": ACTION_OPTIONS,
    }
