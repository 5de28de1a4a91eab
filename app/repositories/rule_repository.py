import threading
from datetime import datetime, timezone
from typing import Dict, Generic, List, Optional, TypeVar, Union

from app.schemas.rules import QualificationRule, TagRule

RuleT = TypeVar("RuleT", QualificationRule, TagRule)


class RuleRepository(Generic[RuleT]):
    """Thread-safe, in-memory rule set keyed by rule id.

    Owned by whoever wires the engines together and injected into them,
    so every test can work with its own independent rule set.

    Upserting an existing id replaces the rule in place: iteration order
    and the first ``created`` stamp are preserved.  Readers always get
    a list copy, so an evaluation pass never sees a rule added or removed
    half-way through.
    """

    def __init__(self) -> None:
        self._rules: Dict[str, RuleT] = {}
        self._lock = threading.RLock()

    def upsert(self, rule: RuleT, now: Optional[datetime] = None) -> RuleT:
        """Insert or replace *rule*, stamping ``created``/``updated``.

        *now* lets a caller that already persisted the stamps reuse them.
        """
        now = now or datetime.now(timezone.utc)
        with self._lock:
            existing = self._rules.get(rule.id)
            created = existing.created if existing and existing.created else now
            stored = rule.model_copy(update={"created": created, "updated": now})
            self._rules[rule.id] = stored
            return stored

    def remove(self, rule_id: str) -> bool:
        """Delete a rule; ``True`` if it existed."""
        with self._lock:
            return self._rules.pop(rule_id, None) is not None

    def get(self, rule_id: str) -> Optional[RuleT]:
        with self._lock:
            return self._rules.get(rule_id)

    def get_all(self) -> List[RuleT]:
        """Return a stable snapshot of every rule in insertion order."""
        with self._lock:
            return list(self._rules.values())

    def get_by_category(self, category: str) -> List[RuleT]:
        """Return rules whose ``category`` equals *category* (tag rules only)."""
        return [
            rule
            for rule in self.get_all()
            if getattr(rule, "category", None) == category
        ]

    def replace_all(self, rules: List[RuleT]) -> None:
        """Swap the whole rule set atomically (used when loading from storage).

        Stored ``created``/``updated`` stamps are kept when present.
        """
        now = datetime.now(timezone.utc)
        fresh: Dict[str, RuleT] = {}
        for rule in rules:
            fresh[rule.id] = rule.model_copy(
                update={
                    "created": rule.created or now,
                    "updated": rule.updated or now,
                }
            )
        with self._lock:
            self._rules = fresh

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        with self._lock:
            return rule_id in self._rules


class QualificationRuleRepository(RuleRepository[QualificationRule]):
    """Rule set consumed by the qualification engine."""


class TagRuleRepository(RuleRepository[TagRule]):
    """Rule set consumed by the tagging engine."""


AnyRuleRepository = Union[QualificationRuleRepository, TagRuleRepository]
