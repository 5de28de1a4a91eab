import logging
from datetime import datetime
from typing import List, Optional, Set

from app.core.constants import (
    TAGGING_MATCH_THRESHOLD,
    TAGGING_OPERATORS,
    TAGGING_SCORE_SCALE,
)
from app.core.exceptions import TaggingError
from app.repositories.rule_repository import TagRuleRepository
from app.schemas.qualification import LeadContext, TagResult
from app.schemas.rules import TagRule
from app.services.contextual_tags import generate_contextual_tags
from app.services.rule_matcher import match_conditions, tagging_evaluator

logger = logging.getLogger(__name__)


class TaggingEngine:
    """Derives a prioritised, de-duplicated tag list for a lead.

    Tag rules run first (60% of conditions must hold); the first rule to
    claim a tag, in descending priority, owns it.  Contextual heuristics
    then add behavioural tags that no rule has claimed.
    """

    def __init__(
        self,
        tag_rule_repo: TagRuleRepository,
        match_threshold: float = TAGGING_MATCH_THRESHOLD,
    ) -> None:
        self._rules = tag_rule_repo
        self._threshold = match_threshold

    def add_tag_rule(
        self, rule: TagRule, stamped_at: Optional[datetime] = None
    ) -> TagRule:
        return self._rules.upsert(rule, now=stamped_at)

    def remove_tag_rule(self, rule_id: str) -> bool:
        return self._rules.remove(rule_id)

    def get_tag_rule(self, rule_id: str) -> Optional[TagRule]:
        return self._rules.get(rule_id)

    def get_all_tag_rules(self) -> List[TagRule]:
        return self._rules.get_all()

    def get_rules_by_category(self, category: str) -> List[TagRule]:
        return self._rules.get_by_category(category)

    def generate_tags(self, context: LeadContext) -> List[TagResult]:
        """Return the lead's tags sorted by priority, then confidence."""
        try:
            return self._generate_tags(context)
        except Exception as exc:
            logger.error("Tagging failed for lead %s", context.lead_id, exc_info=True)
            raise TaggingError() from exc

    def _generate_tags(self, context: LeadContext) -> List[TagResult]:
        record = context.as_record()
        enabled_rules = sorted(
            (rule for rule in self._rules.get_all() if rule.enabled),
            key=lambda rule: rule.priority,
            reverse=True,
        )

        results: List[TagResult] = []
        claimed: Set[str] = set()

        for rule in enabled_rules:
            if rule.tag in claimed:
                continue
            match = match_conditions(
                rule.conditions,
                record,
                threshold=self._threshold,
                score_scale=TAGGING_SCORE_SCALE,
                evaluate=tagging_evaluator,
                allowed_operators=TAGGING_OPERATORS,
                bracket_lists=True,
            )
            if not match.matched:
                continue
            results.append(
                TagResult(
                    tag=rule.tag,
                    confidence=rule.confidence * match.match_ratio,
                    reasoning=", ".join(match.reasoning),
                    category=rule.category.value,
                    priority=rule.priority,
                    applied_rules=[rule.id],
                )
            )
            claimed.add(rule.tag)

        for tag in generate_contextual_tags(context):
            if tag.tag not in claimed:
                results.append(tag)
                claimed.add(tag.tag)

        results.sort(key=lambda t: (-t.priority, -t.confidence))
        return results
