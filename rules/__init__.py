"""
Rules Package

Rule-expression tooling that sits around the rule store: the heuristic
auto-fixer, LLM translation/validation/suggestions, the template gallery and
the step-by-step wizard.
"""

from .autofix import FixResult, auto_fix_rule
from .llm_parser import LLMParser, Suggestion, TranslationResult, ValidationResult
from .templates import RuleTemplate, TemplateApplication, apply_template, get_template, list_templates
from .wizard import WizardSelection, compose_natural_language

__all__ = [
    "FixResult",
    "auto_fix_rule",
    "LLMParser",
    "Suggestion",
    "TranslationResult",
    "ValidationResult",
    "RuleTemplate",
    "TemplateApplication",
    "apply_template",
    "get_template",
    "list_templates",
    "WizardSelection",
    "compose_natural_language",
]
