"""Tests for the end-to-end lead decision pipeline."""

import pytest

from app.core.cache import CacheService
from app.schemas.common import ActionPriority, DecisionStatus
from app.schemas.qualification import LeadContext, QualificationResult, RequiredAction
from app.schemas.routing import AgentAvailability
from app.services.lead_decision_service import LeadDecisionService, determine_status
from app.services.qualification_engine import QualificationEngine
from app.services.routing_planner import RoutingPlanner
from app.services.rule_bootstrap import build_rule_repositories
from app.services.tagging_engine import TaggingEngine


@pytest.fixture
def decision_service() -> LeadDecisionService:
    """Service over the bundled default rules, without Redis."""
    qualification_rules, tag_rules = build_rule_repositories()
    return LeadDecisionService(
        QualificationEngine(qualification_rules),
        TaggingEngine(tag_rules),
        RoutingPlanner(cache=CacheService()),
    )


def _result(**overrides) -> QualificationResult:
    data = {"qualified": False, "confidence": 0.5, "score": 0}
    data.update(overrides)
    return QualificationResult(**data)


GOOD_LEAD = {
    "creditScore": 780,
    "income": 90000,
    "sourceChannel": "organic_search",
    "formCompletionTime": 120,
}


class TestDetermineStatus:
    def test_strong_anomaly_requires_review(self):
        context = LeadContext(
            lead_id="l1", anomaly_detection={"flagged": True, "anomalyScore": 0.9}
        )
        assert determine_status(context, _result(qualified=True, score=95)) == (
            DecisionStatus.requires_review
        )

    def test_weak_anomaly_does_not_force_review(self):
        context = LeadContext(
            lead_id="l1", anomaly_detection={"flagged": True, "anomalyScore": 0.5}
        )
        assert determine_status(context, _result(qualified=True, score=95)) == (
            DecisionStatus.qualified
        )

    def test_veto_requires_review(self):
        context = LeadContext(lead_id="l1")
        assert determine_status(context, _result(vetoed=True, score=80)) == (
            DecisionStatus.requires_review
        )

    def test_pending_manual_review_requires_review(self):
        review = RequiredAction(
            action="Manual review required",
            priority=ActionPriority.high,
            deadline="within 2 hours",
        )
        context = LeadContext(lead_id="l1")
        assert determine_status(context, _result(required_actions=[review])) == (
            DecisionStatus.requires_review
        )

    @pytest.mark.parametrize(
        "qualified, score, expected",
        [
            (True, 90, DecisionStatus.qualified),
            (False, 50, DecisionStatus.nurture),
            (False, 49, DecisionStatus.disqualified),
        ],
    )
    def test_score_bands(self, qualified, score, expected):
        context = LeadContext(lead_id="l1")
        assert determine_status(context, _result(qualified=qualified, score=score)) == expected


class TestDecide:
    @pytest.mark.asyncio
    async def test_good_lead_with_default_rules(self, decision_service):
        decision = await decision_service.decide(
            LeadContext(lead_id="good", features=GOOD_LEAD)
        )

        assert decision.status == DecisionStatus.qualified
        assert decision.qualification.score == 100
        assert decision.qualification.confidence == pytest.approx(0.75)
        assert decision.qualification.applied_rules == [
            "high-credit-score",
            "high-income",
            "quality-source",
        ]
        assert "excellent_credit" in [t.tag for t in decision.tags]
        assert decision.routing is None

    @pytest.mark.asyncio
    async def test_fraud_risk_goes_to_review(self, decision_service):
        decision = await decision_service.decide(
            LeadContext(
                lead_id="risky",
                features=GOOD_LEAD,
                ai_score={"fraudRiskScore": 0.9},
            )
        )

        assert decision.qualification.vetoed is True
        assert decision.status == DecisionStatus.requires_review
        assert "fraud_risk" in decision.qualification.suggested_tags

    @pytest.mark.asyncio
    async def test_agents_produce_routing_plan(self, decision_service):
        agents = [AgentAvailability(id="a1", name="Ada", conversion_rate=0.4)]

        decision = await decision_service.decide(
            LeadContext(lead_id="good", features=GOOD_LEAD), agents
        )

        assert decision.routing.agent_id == "a1"
        assert decision.routing.urgency_level == ActionPriority.urgent

    @pytest.mark.asyncio
    async def test_routing_failure_keeps_decision(self, decision_service):
        agents = [AgentAvailability(id="a1", name="Ada", status="offline")]

        decision = await decision_service.decide(
            LeadContext(lead_id="good", features=GOOD_LEAD), agents
        )

        assert decision.status == DecisionStatus.qualified
        assert decision.routing.agent_id is None
        assert decision.routing.actions[0].action == "Manual assignment required"

    def test_generate_tags_response(self, decision_service):
        response = decision_service.generate_tags(
            LeadContext(lead_id="good", features=GOOD_LEAD)
        )

        assert response.lead_id == "good"
        assert response.summary.total_tags == len(response.tags)
        assert set(response.tags_by_category) == {t.category for t in response.tags}
        assert response.recommendations
