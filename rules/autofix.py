"""
Heuristic auto-fixer for rule expressions.

Repairs common textual defects in generated rule code (unbalanced brackets
and quotes, a missing ``then``, a comparison operator with no value after it)
and reports what it changed together with a confidence score. The result is
only a suggestion: the user decides whether to apply it.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 100
PARENTHESIS_PENALTY = 5
QUOTE_PENALTY = 5
THEN_PENALTY = 10
OPERAND_PENALTY = 15

# Checked in this order. ">" also matches the first character of ">=" tokens.
COMPARISON_OPERATORS = (">", "<", ">=", "<=", "==", "!=")
PLACEHOLDER_OPERAND = "0"
NO_FIX_MESSAGE = "No automatic fixes applied"

_LEADING_KEYWORD = re.compile(r"^(and|or|then)")


@dataclass
class FixResult:
    fixed_rule: str
    fix_explanations: list[str] = field(default_factory=list)
    confidence_score: int = 0
    was_fixed: bool = False

    def to_dict(self) -> dict:
        return {
            "fixedRule": self.fixed_rule,
            "fixExplanations": list(self.fix_explanations),
            "confidenceScore": self.confidence_score,
            "wasFixed": self.was_fixed,
        }


def auto_fix_rule(rule_code: str, errors: Optional[list[str]] = None) -> FixResult:
    """
    Attempt a best-effort syntactic repair of ``rule_code``.

    Args:
        rule_code: Rule expression to repair, may be empty.
        errors: Validation errors reported for the rule. Accepted for
            future targeted fixes; the heuristics do not look at them yet.

    Returns:
        FixResult. When no heuristic fires the original string is echoed
        back with ``was_fixed=False`` and a confidence score of 0.
    """
    if errors:
        logger.debug("Auto-fixing rule with %d reported errors", len(errors))

    fixed = rule_code
    explanations: list[str] = []
    confidence = BASE_CONFIDENCE

    missing = fixed.count("(") - fixed.count(")")
    if missing > 0:
        fixed += ")" * missing
        explanations.append(f"Added {missing} missing closing parenthesis")
        confidence -= PARENTHESIS_PENALTY * missing

    if fixed.count('"') % 2 != 0:
        fixed += '"'
        explanations.append("Added missing closing quote")
        confidence -= QUOTE_PENALTY

    if fixed.count("'") % 2 != 0:
        fixed += "'"
        explanations.append("Added missing closing quote")
        confidence -= QUOTE_PENALTY

    if "if" in fixed and "and" in fixed and "then" not in fixed:
        fixed = _insert_then(fixed)
        explanations.append('Added missing "then" keyword after conditions')
        confidence -= THEN_PENALTY

    for op in COMPARISON_OPERATORS:
        op_index = fixed.find(op)
        if op_index == -1:
            continue
        op_end = op_index + len(op)
        after_op = fixed[op_end:].strip()
        if not after_op or after_op.startswith(("and", "or", "then")):
            rest = _LEADING_KEYWORD.sub("", after_op, count=1)
            fixed = f"{fixed[:op_end]} {PLACEHOLDER_OPERAND} {rest}"
            explanations.append(f'Added missing value after "{op}" operator')
            confidence -= OPERAND_PENALTY

    if not explanations:
        return FixResult(
            fixed_rule=rule_code,
            fix_explanations=[NO_FIX_MESSAGE],
            confidence_score=0,
            was_fixed=False,
        )

    logger.info("Applied %d automatic fixes (confidence %d)", len(explanations), confidence)
    return FixResult(
        fixed_rule=fixed,
        fix_explanations=explanations,
        confidence_score=confidence,
        was_fixed=True,
    )


def _insert_then(rule_code: str) -> str:
    """Insert `` then `` after the condition that follows the last ``and``."""
    and_end = rule_code.rfind("and") + len("and")
    tail = rule_code[and_end:]

    boundaries = [i for i in (tail.find(" and "), tail.find(" or ")) if i != -1]
    insert_at = and_end + min(boundaries) if boundaries else len(rule_code)

    return rule_code[:insert_at] + " then " + rule_code[insert_at:]
