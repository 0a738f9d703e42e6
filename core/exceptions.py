"""
Custom exceptions for RuleWeave.

Lookups of unknown rules or versions are not errors: the store returns None
for those and callers check for it.
"""


class RuleWeaveError(Exception):
    """Base exception for all RuleWeave errors."""

    pass


class InvalidRequestError(RuleWeaveError):
    """Raised when caller input is missing or outside the allowed options."""

    pass


# =============================================================================
# Rule Store Exceptions
# =============================================================================


class RuleStoreError(RuleWeaveError):
    """Base exception for rule store errors."""

    pass


class StorageCorruptedError(RuleStoreError):
    """Raised when the persisted rules blob exists but cannot be decoded."""

    pass


class StorageReadError(RuleStoreError):
    """Raised when the persisted rules blob exists but cannot be read."""

    pass


# =============================================================================
# LLM Exceptions
# =============================================================================


class LLMError(RuleWeaveError):
    """Base exception for LLM collaborator errors."""

    pass


class MissingCredentialError(LLMError):
    """Raised when no API key is available for the LLM provider."""

    pass


class LLMServiceError(LLMError):
    """Raised when the LLM provider call fails."""

    pass


# =============================================================================
# Template Exceptions
# =============================================================================


class TemplateNotFoundError(RuleWeaveError):
    """Raised when a template id is not in the gallery."""

    pass
