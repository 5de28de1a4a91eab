import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from app.core.constants import (
    DEFAULT_RULE_PRIORITY,
    QUALIFICATION_OPERATORS,
    TAGGING_OPERATORS,
)
from app.core.exceptions import (
    DuplicateRuleError,
    RuleNotFoundError,
    RuleStoreUnavailableError,
    RuleValidationError,
)
from app.repositories.rule_definition_repository import (
    QUALIFICATION_KIND,
    TAG_KIND,
    RuleDefinitionRepository,
)
from app.schemas.admin import RuleStatistics, TagRuleStatistics
from app.schemas.rules import QualificationRule, TagRule
from app.services.qualification_engine import QualificationEngine, round_half_up
from app.services.rule_matcher import condition_diagnostics
from app.services.rule_validation import validate_rule, validate_tag_rule
from app.services.tagging_engine import TaggingEngine

logger = logging.getLogger(__name__)

_TIMESTAMP_FIELDS = {"created", "updated"}


def _schema_errors(exc: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]


def _build(
    model,
    payload: Mapping[str, Any],
    validator: Callable[[Mapping], List[str]],
    operators,
):
    """Validate *payload* administratively, then as a model.

    Conditions that pass validation but can never match (a non-numeric
    comparison operand) are admitted with a warning.
    """
    errors = validator(payload)
    if errors:
        raise RuleValidationError(errors)
    try:
        rule = model.model_validate(dict(payload))
    except ValidationError as exc:
        raise RuleValidationError(_schema_errors(exc)) from exc
    for problem in condition_diagnostics(rule.conditions, operators):
        logger.warning("Rule %s admitted but never matches on %s", rule.id, problem)
    return rule


def _definition(rule) -> Dict[str, Any]:
    return rule.model_dump(mode="json")


def _stamped(rule, existing, now: datetime):
    """Copy of *rule* carrying the stamps it will have once stored."""
    created = existing.created if existing is not None and existing.created else now
    return rule.model_copy(update={"created": created, "updated": now})


def _editable_fields(rule) -> Dict[str, Any]:
    return rule.model_dump(mode="json", exclude=_TIMESTAMP_FIELDS)


class RuleAdminService:
    """Create, update, delete and inspect the live rule sets.

    Every mutation is validated first and, when a ``store`` is given,
    written to the database before the in-memory repository changes, so
    a failed write leaves the running engines untouched.
    """

    def __init__(
        self,
        qualification_engine: QualificationEngine,
        tagging_engine: TaggingEngine,
        store: Optional[RuleDefinitionRepository] = None,
    ) -> None:
        self._qualification = qualification_engine
        self._tagging = tagging_engine
        self._store = store

    # ------------------------------------------------------------------
    # Qualification rules
    # ------------------------------------------------------------------

    def list_rules(self) -> List[QualificationRule]:
        """All rules, highest priority first."""
        return sorted(
            self._qualification.get_all_rules(),
            key=lambda rule: rule.priority,
            reverse=True,
        )

    def rule_statistics(self) -> RuleStatistics:
        rules = self._qualification.get_all_rules()
        enabled = sum(1 for rule in rules if rule.enabled)
        rule_types = Counter(action.type for rule in rules for action in rule.actions)
        return RuleStatistics(
            total=len(rules),
            enabled=enabled,
            disabled=len(rules) - enabled,
            average_priority=self._average_priority(rules),
            rule_types=dict(rule_types),
        )

    async def create_rule(self, payload: Mapping[str, Any]) -> QualificationRule:
        candidate = {"enabled": True, "priority": DEFAULT_RULE_PRIORITY, **payload}
        rule = _build(QualificationRule, candidate, validate_rule, QUALIFICATION_OPERATORS)

        if self._qualification.get_rule(rule.id) is not None:
            raise DuplicateRuleError()

        now = datetime.now(timezone.utc)
        rule = _stamped(rule, None, now)
        await self._persist(QUALIFICATION_KIND, rule.id, _definition(rule))
        stored = self._qualification.add_rule(rule, stamped_at=now)
        logger.info("Qualification rule %s created", stored.id)
        return stored

    async def update_rule(
        self, rule_id: str, updates: Mapping[str, Any]
    ) -> QualificationRule:
        existing = self._qualification.get_rule(rule_id)
        if existing is None:
            raise RuleNotFoundError()

        # Merge over the current definition; the id never changes
        merged = {**_editable_fields(existing), **updates, "id": rule_id}
        rule = _build(QualificationRule, merged, validate_rule, QUALIFICATION_OPERATORS)

        now = datetime.now(timezone.utc)
        rule = _stamped(rule, existing, now)
        await self._persist(QUALIFICATION_KIND, rule_id, _definition(rule))
        stored = self._qualification.add_rule(rule, stamped_at=now)
        logger.info("Qualification rule %s updated", rule_id)
        return stored

    async def delete_rule(self, rule_id: str) -> None:
        if self._qualification.get_rule(rule_id) is None:
            raise RuleNotFoundError()
        await self._forget(QUALIFICATION_KIND, rule_id)
        self._qualification.remove_rule(rule_id)
        logger.info("Qualification rule %s deleted", rule_id)

    # ------------------------------------------------------------------
    # Tag rules
    # ------------------------------------------------------------------

    def list_tag_rules(self, category: Optional[str] = None) -> List[TagRule]:
        if category:
            return self._tagging.get_rules_by_category(category)
        return self._tagging.get_all_tag_rules()

    def available_categories(self) -> List[str]:
        """Categories in use, in first-seen order."""
        return list(
            dict.fromkeys(
                rule.category.value for rule in self._tagging.get_all_tag_rules()
            )
        )

    def tag_rule_statistics(self) -> TagRuleStatistics:
        rules = self._tagging.get_all_tag_rules()
        enabled = sum(1 for rule in rules if rule.enabled)
        confidence = (
            round(sum(rule.confidence for rule in rules) / len(rules), 2)
            if rules
            else 0.0
        )
        return TagRuleStatistics(
            total=len(rules),
            enabled=enabled,
            disabled=len(rules) - enabled,
            average_priority=self._average_priority(rules),
            average_confidence=confidence,
            category_counts=dict(Counter(rule.category.value for rule in rules)),
        )

    async def create_tag_rule(self, payload: Mapping[str, Any]) -> TagRule:
        candidate = {"enabled": True, "priority": DEFAULT_RULE_PRIORITY, **payload}
        rule = _build(TagRule, candidate, validate_tag_rule, TAGGING_OPERATORS)

        if self._tagging.get_tag_rule(rule.id) is not None:
            raise DuplicateRuleError()

        now = datetime.now(timezone.utc)
        rule = _stamped(rule, None, now)
        await self._persist(TAG_KIND, rule.id, _definition(rule))
        stored = self._tagging.add_tag_rule(rule, stamped_at=now)
        logger.info("Tag rule %s created", stored.id)
        return stored

    async def update_tag_rule(
        self, rule_id: str, updates: Mapping[str, Any]
    ) -> TagRule:
        existing = self._tagging.get_tag_rule(rule_id)
        if existing is None:
            raise RuleNotFoundError()

        merged = {**_editable_fields(existing), **updates, "id": rule_id}
        rule = _build(TagRule, merged, validate_tag_rule, TAGGING_OPERATORS)

        now = datetime.now(timezone.utc)
        rule = _stamped(rule, existing, now)
        await self._persist(TAG_KIND, rule_id, _definition(rule))
        stored = self._tagging.add_tag_rule(rule, stamped_at=now)
        logger.info("Tag rule %s updated", rule_id)
        return stored

    async def delete_tag_rule(self, rule_id: str) -> None:
        if self._tagging.get_tag_rule(rule_id) is None:
            raise RuleNotFoundError()
        await self._forget(TAG_KIND, rule_id)
        self._tagging.remove_tag_rule(rule_id)
        logger.info("Tag rule %s deleted", rule_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _average_priority(rules) -> float:
        if not rules:
            return 0
        return round_half_up(sum(rule.priority for rule in rules) / len(rules))

    async def _persist(self, kind: str, rule_id: str, definition: Dict[str, Any]) -> None:
        if self._store is None:
            return
        try:
            await self._store.upsert_definition(kind, rule_id, definition)
            await self._store.commit()
        except Exception as exc:
            logger.error("Failed to store %s rule %s", kind, rule_id, exc_info=True)
            await self._safe_rollback()
            raise RuleStoreUnavailableError() from exc

    async def _forget(self, kind: str, rule_id: str) -> None:
        if self._store is None:
            return
        try:
            await self._store.delete_definition(kind, rule_id)
            await self._store.commit()
        except Exception as exc:
            logger.error("Failed to delete %s rule %s", kind, rule_id, exc_info=True)
            await self._safe_rollback()
            raise RuleStoreUnavailableError() from exc

    async def _safe_rollback(self) -> None:
        try:
            await self._store.rollback()
        except Exception:
            logger.warning("Rollback after failed rule write also failed")
