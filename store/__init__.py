"""
Rule Store

This module provides:
- Named rules with an append-only version history
- Create / update-with-versioning, lookup and idempotent delete
- Revert-to-version that appends a reversion entry instead of rewinding
- Pluggable blob storage (in-memory, JSON file, unavailable)
"""

from .models import (
    Rule,
    RuleVersion,
    SaveRuleRequest,
    RevertRequest,
)
from .service import RuleStore
from .storage import (
    RuleStorage,
    InMemoryStorage,
    FileStorage,
    UnavailableStorage,
    create_storage,
)

__all__ = [
    "Rule",
    "RuleVersion",
    "SaveRuleRequest",
    "RevertRequest",
    "RuleStore",
    "RuleStorage",
    "InMemoryStorage",
    "FileStorage",
    "UnavailableStorage",
    "create_storage",
]
