import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app.core.constants import (
    AI_BORDERLINE_SCORE,
    AI_CONVERSION_THRESHOLD,
    CONFIDENCE_WEIGHT_DIVISOR,
    DEFAULT_QUALIFY_SCORE,
    HIGH_CONFIDENCE_THRESHOLD,
    HIGH_SCORE_THRESHOLD,
    NURTURE_SCORE_THRESHOLD,
    QUALIFICATION_MATCH_THRESHOLD,
    QUALIFICATION_OPERATORS,
    QUALIFICATION_SCORE_SCALE,
    URGENT_ROUTING_SCORE,
)
from app.core.exceptions import QualificationError
from app.repositories.rule_repository import QualificationRuleRepository
from app.schemas.common import ActionPriority
from app.schemas.qualification import (
    LeadContext,
    QualificationResult,
    RequiredAction,
)
from app.schemas.rules import (
    DisqualifyAction,
    QualificationRule,
    QualifyAction,
    ReviewAction,
    RouteAction,
    ScoreAdjustmentAction,
    TagAction,
)
from app.services.conditions import format_value, try_coerce_number
from app.services.rule_matcher import match_conditions, qualification_evaluator

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class _Decision:
    """Mutable accumulator for a single qualification pass."""

    score: float = 0
    confidence: float = 0
    qualified: bool = False
    vetoed: bool = False
    reasoning: List[str] = field(default_factory=list)
    applied_rules: List[str] = field(default_factory=list)
    suggested_tags: List[str] = field(default_factory=list)
    routing_recommendation: Optional[str] = None
    required_actions: List[RequiredAction] = field(default_factory=list)


class QualificationEngine:
    """Weighted, priority-ordered rule evaluation producing a qualification.

    The engine keeps no per-lead state; the only shared state is the
    injected rule repository, read once per ``qualify`` call.

    Pipeline for one lead:
        1. enabled rules, priority descending (stable)
        2. match each rule (70% of conditions), accumulate weight/score
        3. run matched rules' actions against the accumulator
        4. weighted score and confidence
        5. final qualification policy (veto, high score, AI, default)
        6. follow-up actions
    """

    def __init__(
        self,
        rule_repo: QualificationRuleRepository,
        match_threshold: float = QUALIFICATION_MATCH_THRESHOLD,
    ) -> None:
        self._rules = rule_repo
        self._threshold = match_threshold

    # ------------------------------------------------------------------
    # Rule administration
    # ------------------------------------------------------------------

    def add_rule(
        self, rule: QualificationRule, stamped_at: Optional[datetime] = None
    ) -> QualificationRule:
        """Insert or overwrite a rule by id."""
        return self._rules.upsert(rule, now=stamped_at)

    def remove_rule(self, rule_id: str) -> bool:
        return self._rules.remove(rule_id)

    def get_rule(self, rule_id: str) -> Optional[QualificationRule]:
        return self._rules.get(rule_id)

    def get_all_rules(self) -> List[QualificationRule]:
        return self._rules.get_all()

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def qualify(self, context: LeadContext) -> QualificationResult:
        """Run the full qualification pass for one lead.

        Raises ``QualificationError`` if anything unexpected happens; no
        partial result is ever returned.
        """
        try:
            return self._qualify(context)
        except Exception as exc:
            logger.error(
                "Qualification failed for lead %s", context.lead_id, exc_info=True
            )
            raise QualificationError() from exc

    def _qualify(self, context: LeadContext) -> QualificationResult:
        record = context.as_record()
        enabled_rules = sorted(
            (rule for rule in self._rules.get_all() if rule.enabled),
            key=lambda rule: rule.priority,
            reverse=True,
        )

        decision = _Decision()
        total_weight = 0.0
        weighted_score = 0.0

        for rule in enabled_rules:
            match = match_conditions(
                rule.conditions,
                record,
                threshold=self._threshold,
                score_scale=QUALIFICATION_SCORE_SCALE,
                evaluate=qualification_evaluator,
                allowed_operators=QUALIFICATION_OPERATORS,
            )
            if not match.matched:
                continue

            decision.applied_rules.append(rule.id)
            decision.reasoning.extend(match.reasoning)
            total_weight += match.weight
            weighted_score += match.score * match.weight

            self._execute_actions(rule, decision)

        if total_weight > 0:
            decision.score = round_half_up(weighted_score / total_weight)
            decision.confidence = min(1.0, total_weight / CONFIDENCE_WEIGHT_DIVISOR)

        decision.qualified = self._determine_final_qualification(decision, context)
        decision.required_actions.extend(self._generate_required_actions(decision))

        logger.debug(
            "Lead %s: qualified=%s score=%s rules=%s",
            context.lead_id,
            decision.qualified,
            decision.score,
            decision.applied_rules,
        )

        return QualificationResult(
            qualified=decision.qualified,
            confidence=decision.confidence,
            score=decision.score,
            reasoning=decision.reasoning,
            applied_rules=decision.applied_rules,
            suggested_tags=list(dict.fromkeys(decision.suggested_tags)),
            routing_recommendation=decision.routing_recommendation,
            required_actions=decision.required_actions,
            vetoed=decision.vetoed,
        )

    @staticmethod
    def _execute_actions(rule: QualificationRule, decision: _Decision) -> None:
        """Apply a matched rule's actions in order.

        Later actions may override earlier ones within the same pass
        (``route`` is last-writer-wins, ``score_adjustment`` accumulates).
        """
        for action in rule.actions:
            if isinstance(action, QualifyAction):
                # Advisory only: final qualification is decided after all rules
                decision.reasoning.append(action.reasoning)

            elif isinstance(action, DisqualifyAction):
                decision.qualified = False
                decision.vetoed = True
                decision.reasoning.append(action.reasoning)

            elif isinstance(action, ReviewAction):
                decision.required_actions.append(
                    RequiredAction(
                        action="Manual review required",
                        priority=ActionPriority.high,
                        deadline="within 2 hours",
                    )
                )
                decision.reasoning.append(action.reasoning)

            elif isinstance(action, TagAction):
                decision.suggested_tags.extend(action.tags)

            elif isinstance(action, RouteAction):
                decision.routing_recommendation = action.value

            elif isinstance(action, ScoreAdjustmentAction):
                delta = try_coerce_number(action.value)
                if delta is None:
                    logger.warning(
                        "Rule %s: ignoring non-numeric score adjustment %r",
                        rule.id,
                        action.value,
                    )
                    continue
                decision.score += delta
                decision.reasoning.append(
                    f"Score adjusted by {format_value(delta)}: {action.reasoning}"
                )

            else:
                raise TypeError(f"Unsupported action in rule {rule.id}: {action!r}")

    @staticmethod
    def _determine_final_qualification(
        decision: _Decision, context: LeadContext
    ) -> bool:
        # A disqualify action is a hard veto
        if decision.vetoed:
            return False

        if (
            decision.score >= HIGH_SCORE_THRESHOLD
            and decision.confidence >= HIGH_CONFIDENCE_THRESHOLD
        ):
            return True

        # Borderline leads defer to the external AI score when present
        if context.ai_score is not None and decision.score >= AI_BORDERLINE_SCORE:
            probability = try_coerce_number(
                context.ai_score.get("conversionProbability")
            )
            return probability is not None and probability >= AI_CONVERSION_THRESHOLD

        return decision.score >= DEFAULT_QUALIFY_SCORE

    @staticmethod
    def _generate_required_actions(decision: _Decision) -> List[RequiredAction]:
        if decision.qualified:
            urgent = decision.score >= URGENT_ROUTING_SCORE
            return [
                RequiredAction(
                    action="Route to sales team",
                    priority=ActionPriority.urgent if urgent else ActionPriority.high,
                    deadline="within 15 minutes" if urgent else "within 2 hours",
                ),
                RequiredAction(
                    action="Apply suggested tags",
                    priority=ActionPriority.medium,
                    deadline="within 1 hour",
                ),
            ]
        if decision.score >= NURTURE_SCORE_THRESHOLD:
            return [
                RequiredAction(
                    action="Add to nurture campaign",
                    priority=ActionPriority.medium,
                    deadline="within 24 hours",
                )
            ]
        return [
            RequiredAction(
                action="Update lead status to disqualified",
                priority=ActionPriority.low,
                deadline="within 24 hours",
            )
        ]
