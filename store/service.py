import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from core.exceptions import StorageCorruptedError
from .models import Rule, RuleVersion, SaveRuleRequest
from .storage import InMemoryStorage, RuleStorage

logger = logging.getLogger(__name__)

_rules_adapter = TypeAdapter(list[Rule])


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RuleStore:
    """
    CRUD over the persisted rule collection with per-rule version history.

    Every operation reads the whole collection from storage, changes a copy
    and writes the whole collection back. Nothing is cached between calls, so
    two writers sharing one storage blob overwrite each other (last write wins).
    """

    def __init__(self, storage: Optional[RuleStorage] = None, clock: Optional[Callable[[], datetime]] = None):
        self.storage = storage or InMemoryStorage()
        self.clock = clock or _utcnow

    def list_all(self) -> list[Rule]:
        return self._load()

    def get_by_id(self, rule_id: str) -> Optional[Rule]:
        for rule in self._load():
            if rule.id == rule_id:
                return rule
        return None

    def save(self, request: SaveRuleRequest) -> Rule:
        rules = self._load()
        now = self.clock()

        index = self._find_index(rules, request.id) if request.id else None
        if index is not None:
            existing = rules[index]
            versions = list(existing.versions)
            if existing.rule_code != request.rule_code:
                versions.append(RuleVersion(rule_code=request.rule_code, timestamp=now))
            rule = Rule(
                id=existing.id,
                name=request.name,
                natural_language=request.natural_language,
                rule_code=request.rule_code,
                created_at=existing.created_at,
                updated_at=now,
                versions=versions,
            )
            rules[index] = rule
            logger.info("Updated rule %s (%d versions)", rule.id, len(versions))
        else:
            versions = list(request.versions or [])
            if not versions or versions[-1].rule_code != request.rule_code:
                versions.append(RuleVersion(rule_code=request.rule_code, timestamp=now))
            rule = Rule(
                id=request.id or f"rule_{uuid4().hex}",
                name=request.name,
                natural_language=request.natural_language,
                rule_code=request.rule_code,
                created_at=request.created_at or now,
                updated_at=now,
                versions=versions,
            )
            rules.append(rule)
            logger.info("Created rule %s", rule.id)

        self._persist(rules)
        return rule

    def delete_by_id(self, rule_id: str) -> bool:
        rules = self._load()
        remaining = [r for r in rules if r.id != rule_id]
        if len(remaining) == len(rules):
            logger.debug("Delete of unknown rule %s ignored", rule_id)
        self._persist(remaining)
        return True

    def revert(self, rule_id: str, version_index: int) -> Optional[Rule]:
        rules = self._load()
        index = self._find_index(rules, rule_id)
        if index is None:
            return None

        rule = rules[index]
        if not 0 <= version_index < len(rule.versions):
            return None

        target = rule.versions[version_index]
        now = self.clock()
        reverted = rule.model_copy(update={
            "rule_code": target.rule_code,
            "updated_at": now,
            "versions": [
                *rule.versions,
                RuleVersion(
                    rule_code=target.rule_code,
                    timestamp=now,
                    is_reversion=True,
                    reverted_from_version=version_index,
                ),
            ],
        })
        rules[index] = reverted
        self._persist(rules)
        logger.info("Reverted rule %s to version %d", rule_id, version_index)
        return reverted

    def _load(self) -> list[Rule]:
        blob = self.storage.read()
        if not blob:
            return []
        try:
            return _rules_adapter.validate_json(blob)
        except ValidationError as e:
            logger.error("Stored rules blob could not be decoded: %s", e)
            raise StorageCorruptedError("Stored rules could not be decoded") from e

    def _persist(self, rules: list[Rule]) -> None:
        blob = _rules_adapter.dump_json(rules, by_alias=True, exclude_none=True)
        self.storage.write(blob.decode("utf-8"))

    @staticmethod
    def _find_index(rules: list[Rule], rule_id: str) -> Optional[int]:
        for i, rule in enumerate(rules):
            if rule.id == rule_id:
                return i
        return None
