import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from app.core.cache import CacheService
from app.core.config import settings
from app.core.constants import (
    AGENT_AVAILABLE_STATUS,
    URGENCY_RESPONSE_CAP_MINUTES,
    URGENCY_TIMING,
)
from app.core.exceptions import NoAgentAvailableError
from app.schemas.common import ActionPriority
from app.schemas.qualification import (
    LeadContext,
    QualificationResult,
    RequiredAction,
    TagResult,
)
from app.schemas.routing import (
    AgentAvailability,
    AlternativeAgent,
    FollowUpStrategy,
    RoutingPlan,
)
from app.services.conditions import try_coerce_number
from app.services.qualification_engine import round_half_up

logger = logging.getLogger(__name__)

# Redis key prefix for per-score-group round-robin counters
_ROUND_ROBIN_KEY_PREFIX = "round_robin:routing"
_MAX_ALTERNATIVES = 3

_FALLBACK_ACTIONS = [
    "Send personalized email if no phone response",
    "Schedule follow-up call for next business day",
    "Add to automated nurture sequence",
]


def _workload(agent: AgentAvailability) -> float:
    return agent.active_leads / agent.max_leads


class RoutingPlanner:
    """Match a qualified lead to the best available agent.

    Scoring components (each capped into the final 0-1 score):
    - Performance: conversion, response time, deal value, satisfaction,
      spare capacity                                            (x0.4)
    - Lead match: credit/high-value skills, lead-type preferences (x0.3)
    - AI signals: closing expert, new-lead expert               (x0.2)
    - Urgency: fast responders, low workload                     (x0.1)

    Ties at the top score go to the lowest workload; remaining ties
    rotate through a Redis counter scoped to the score, with an
    in-process fallback when Redis is unavailable.
    """

    # In-process fallback when Redis is unavailable
    _fallback_counter: int = 0

    def __init__(
        self,
        cache: Optional[CacheService] = None,
        round_robin_ttl: int = settings.ROUND_ROBIN_TTL,
    ) -> None:
        self._cache: CacheService = cache or CacheService()
        self._ttl = round_robin_ttl

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def plan(
        self,
        context: LeadContext,
        qualification: QualificationResult,
        tags: Sequence[TagResult],
        agents: Iterable[AgentAvailability],
    ) -> RoutingPlan:
        """Build a routing plan; raises ``NoAgentAvailableError``."""
        candidates = [
            agent
            for agent in agents
            if agent.status == AGENT_AVAILABLE_STATUS
            and agent.active_leads < agent.max_leads
        ]
        if not candidates:
            raise NoAgentAvailableError()

        tag_names = self._tag_names(qualification, tags)
        urgency = self.determine_urgency(context, qualification, tag_names)

        scored = [
            (agent, *self._score_agent(agent, context, tag_names, urgency))
            for agent in candidates
        ]
        scored.sort(key=lambda item: item[1], reverse=True)

        selected = await self._select_with_roundrobin(scored)
        best_score, best_points = next(
            (score, points) for agent, score, points in scored if agent is selected
        )

        alternatives = [
            AlternativeAgent(
                agent_id=agent.id,
                name=agent.name,
                confidence=score,
                reasoning="; ".join(points) or "Standard agent matching applied",
            )
            for agent, score, points in scored
            if agent is not selected
        ][:_MAX_ALTERNATIVES]

        follow_up = self._follow_up_strategy(context, urgency)

        logger.info(
            "Lead %s routed to agent %s (score=%.3f, urgency=%s)",
            context.lead_id,
            selected.id,
            best_score,
            urgency.value,
        )

        return RoutingPlan(
            agent_id=selected.id,
            agent_name=selected.name,
            confidence=best_score,
            reasoning=best_points,
            alternatives=alternatives,
            urgency_level=urgency,
            estimated_response_time=self._estimated_response_time(selected, urgency),
            follow_up=follow_up,
            routing_recommendation=qualification.routing_recommendation,
            actions=[
                RequiredAction(
                    action=f"Contact lead via {follow_up.primary_channel}",
                    priority=urgency,
                    deadline=follow_up.timing,
                )
            ],
        )

    async def plan_safely(
        self,
        context: LeadContext,
        qualification: QualificationResult,
        tags: Sequence[TagResult],
        agents: Iterable[AgentAvailability],
    ) -> RoutingPlan:
        """Like ``plan`` but never raises.

        A failed routing yields a plan without an agent and a manual
        assignment action; the qualification decision is unaffected.
        """
        try:
            return await self.plan(context, qualification, tags, agents)
        except NoAgentAvailableError as exc:
            logger.warning("Lead %s not routed: %s", context.lead_id, exc.detail)
            reason = exc.detail
        except Exception:
            logger.error("Routing failed for lead %s", context.lead_id, exc_info=True)
            reason = "Failed to route lead intelligently"

        return RoutingPlan(
            reasoning=[reason],
            routing_recommendation=qualification.routing_recommendation,
            actions=[
                RequiredAction(
                    action="Manual assignment required",
                    priority=ActionPriority.high,
                    deadline="within 1 hour",
                )
            ],
        )

    # ------------------------------------------------------------------
    # Urgency and follow-up
    # ------------------------------------------------------------------

    @staticmethod
    def determine_urgency(
        context: LeadContext,
        qualification: QualificationResult,
        tag_names: Sequence[str] = (),
    ) -> ActionPriority:
        features = context.features or {}
        ai_score = context.ai_score or {}
        anomaly = context.anomaly_detection or {}

        conversion = try_coerce_number(ai_score.get("conversionProbability"))
        if conversion is not None and conversion >= 0.9:
            return ActionPriority.urgent
        if conversion is not None and conversion >= 0.8:
            return ActionPriority.high

        income = try_coerce_number(features.get("income"))
        if income is not None and income >= 100000:
            return ActionPriority.high

        credit_score = try_coerce_number(features.get("creditScore"))
        if credit_score is not None and credit_score >= 800:
            return ActionPriority.high

        if anomaly.get("flagged"):
            return ActionPriority.urgent

        # Qualified leads inherit the urgency of their routing action
        for action in qualification.required_actions:
            if action.action == "Route to sales team":
                return action.priority

        if "high_quality" in tag_names or "excellent_credit" in tag_names:
            return ActionPriority.medium

        return ActionPriority.low

    @staticmethod
    def _follow_up_strategy(
        context: LeadContext, urgency: ActionPriority
    ) -> FollowUpStrategy:
        features = context.features or {}
        channel = "sms" if features.get("deviceType") == "mobile" else "phone"

        fallback_actions = list(_FALLBACK_ACTIONS)
        if (context.anomaly_detection or {}).get("flagged"):
            fallback_actions.insert(0, "Verify lead information before contact")

        return FollowUpStrategy(
            primary_channel=channel,
            timing=URGENCY_TIMING[urgency.value],
            fallback_actions=fallback_actions,
        )

    @staticmethod
    def _estimated_response_time(
        agent: AgentAvailability, urgency: ActionPriority
    ) -> int:
        base = agent.avg_response_time
        cap = URGENCY_RESPONSE_CAP_MINUTES.get(urgency.value)
        if cap is not None:
            base = min(base, cap)
        return round_half_up(base * (1 + _workload(agent)))

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    @staticmethod
    def _tag_names(
        qualification: QualificationResult, tags: Sequence[TagResult]
    ) -> List[str]:
        names = [tag.tag for tag in tags] + list(qualification.suggested_tags)
        return list(dict.fromkeys(names))

    @staticmethod
    def _score_agent(
        agent: AgentAvailability,
        context: LeadContext,
        tag_names: Sequence[str],
        urgency: ActionPriority,
    ) -> Tuple[float, List[str]]:
        features = context.features or {}
        ai_score = context.ai_score
        skills = agent.skills
        points: List[str] = []
        workload = _workload(agent)

        performance = (
            agent.conversion_rate * 0.4
            + (5 - agent.avg_response_time / 60) * 0.1
            + (agent.avg_deal_value / 10000) * 0.2
            + agent.satisfaction_score * 0.1
            + (1 - workload) * 0.2
        ) * 0.4
        total = performance
        points.append(f"Performance score: {round_half_up(performance * 100)}%")

        matching = 0.0
        credit_score = try_coerce_number(features.get("creditScore"))
        if credit_score:
            if credit_score >= 750 and skills.credit_specialist:
                matching += 0.15
                points.append("Matches credit specialist for high credit score lead")
            elif credit_score < 600 and skills.difficult_cases:
                matching += 0.12
                points.append(
                    "Matches difficult cases specialist for challenging credit"
                )

        income = try_coerce_number(features.get("income"))
        if income is not None and income >= 75000 and skills.high_value_deals:
            matching += 0.1
            points.append("Matches high-value deal specialist")

        lead_types = [t.lower() for t in agent.lead_types]
        relevant = [
            tag for tag in tag_names if any(t in tag.lower() for t in lead_types)
        ]
        if relevant:
            matching += len(relevant) * 0.05
            points.append(f"Matches {len(relevant)} lead type preferences")
        total += matching * 0.3

        ai_bonus = 0.0
        if ai_score:
            conversion = try_coerce_number(ai_score.get("conversionProbability"))
            if conversion is not None and conversion >= 0.8 and skills.closing_expert:
                ai_bonus += 0.15
                points.append("Closing expert for high-probability conversion")
            if not features.get("previousApplications") and skills.new_lead_expert:
                ai_bonus += 0.1
                points.append("New lead expert for first-time applicant")
        total += ai_bonus * 0.2

        availability = 0.0
        if urgency == ActionPriority.urgent and agent.avg_response_time <= 30:
            availability += 0.08
            points.append("Fast responder for urgent lead")
        if urgency in (ActionPriority.high, ActionPriority.urgent):
            availability += (1 - workload) * 0.05
            points.append(f"Low workload ({round_half_up(workload * 100)}% capacity)")
        total += availability * 0.1

        return min(1.0, max(0.0, total)), points

    async def _select_with_roundrobin(
        self, scored: List[Tuple[AgentAvailability, float, List[str]]]
    ) -> AgentAvailability:
        """Pick among the top-scoring agents.

        Lowest workload wins outright; agents still tied rotate through a
        counter keyed by score (``round_robin:routing:{score}``).
        """
        max_score = max(score for _, score, _ in scored)
        top_agents = [agent for agent, score, _ in scored if score == max_score]

        lowest = min(_workload(agent) for agent in top_agents)
        top_agents = [agent for agent in top_agents if _workload(agent) == lowest]
        top_agents.sort(key=lambda agent: agent.id)

        if len(top_agents) == 1:
            return top_agents[0]

        rr_key = f"{_ROUND_ROBIN_KEY_PREFIX}:{max_score:.4f}"

        counter = await self._cache.incr(rr_key, ttl=self._ttl)
        if counter is not None:
            return top_agents[(counter - 1) % len(top_agents)]

        # In-process fallback when Redis is unavailable
        counter = RoutingPlanner._fallback_counter
        RoutingPlanner._fallback_counter += 1
        return top_agents[counter % len(top_agents)]
