import logging
from typing import Optional, Sequence

from app.core.constants import NURTURE_SCORE_THRESHOLD
from app.schemas.common import DecisionStatus
from app.schemas.decision import LeadDecisionResponse, TagGenerationResponse
from app.schemas.qualification import LeadContext, QualificationResult
from app.schemas.routing import AgentAvailability, RoutingPlan
from app.services.conditions import try_coerce_number
from app.services.qualification_engine import QualificationEngine
from app.services.routing_planner import RoutingPlanner
from app.services.tag_insights import (
    group_by_category,
    recommend_from_tags,
    summarize_tags,
)
from app.services.tagging_engine import TaggingEngine

logger = logging.getLogger(__name__)

_ANOMALY_REVIEW_SCORE = 0.8


def determine_status(
    context: LeadContext, qualification: QualificationResult
) -> DecisionStatus:
    """Collapse a qualification into the operator-facing lead status."""
    anomaly = context.anomaly_detection or {}
    anomaly_score = try_coerce_number(anomaly.get("anomalyScore"))
    if anomaly.get("flagged") and anomaly_score is not None and (
        anomaly_score > _ANOMALY_REVIEW_SCORE
    ):
        return DecisionStatus.requires_review

    pending_review = any(
        action.action == "Manual review required"
        for action in qualification.required_actions
    )
    if qualification.vetoed or pending_review:
        return DecisionStatus.requires_review

    if qualification.qualified:
        return DecisionStatus.qualified
    if qualification.score >= NURTURE_SCORE_THRESHOLD:
        return DecisionStatus.nurture
    return DecisionStatus.disqualified


class LeadDecisionService:
    """Runs the evaluate, tag, qualify and route stages for one lead.

    Qualification and tagging failures propagate as their domain errors;
    routing never fails the decision.
    """

    def __init__(
        self,
        qualification_engine: QualificationEngine,
        tagging_engine: TaggingEngine,
        routing_planner: RoutingPlanner,
    ) -> None:
        self._qualification = qualification_engine
        self._tagging = tagging_engine
        self._routing = routing_planner

    def generate_tags(self, context: LeadContext) -> TagGenerationResponse:
        tags = self._tagging.generate_tags(context)
        summary = summarize_tags(tags)
        return TagGenerationResponse(
            lead_id=context.lead_id,
            tags=tags,
            tags_by_category=group_by_category(tags),
            summary=summary,
            recommendations=recommend_from_tags(tags, summary),
        )

    async def decide(
        self,
        context: LeadContext,
        agents: Optional[Sequence[AgentAvailability]] = None,
    ) -> LeadDecisionResponse:
        """Qualify and tag the lead, then route it when agents are given."""
        qualification = self._qualification.qualify(context)
        tags = self._tagging.generate_tags(context)

        routing: Optional[RoutingPlan] = None
        if agents:
            routing = await self._routing.plan_safely(
                context, qualification, tags, agents
            )

        status = determine_status(context, qualification)
        logger.info(
            "Lead %s decided: status=%s score=%s tags=%d",
            context.lead_id,
            status.value,
            qualification.score,
            len(tags),
        )

        return LeadDecisionResponse(
            lead_id=context.lead_id,
            status=status,
            qualification=qualification,
            tags=tags,
            tag_summary=summarize_tags(tags),
            routing=routing,
        )

