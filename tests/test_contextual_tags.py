"""Tests for the behavioural heuristics behind contextual tags."""

import pytest

from app.core.constants import DECISION_STAGES
from app.schemas.qualification import LeadContext
from app.services.contextual_tags import (
    calculate_engagement_score,
    generate_contextual_tags,
    predict_decision_stage,
)


def _tag_names(**kwargs):
    return [t.tag for t in generate_contextual_tags(LeadContext(lead_id="l1", **kwargs))]


class TestEngagementScore:
    def test_no_features(self):
        assert calculate_engagement_score({}) == 0.0
        assert calculate_engagement_score(None) == 0.0

    def test_all_factors_maxed(self):
        features = {
            "sessionDuration": 600,
            "pageViews": 8,
            "formFieldsCompleted": 10,
            "requiredFieldsCompleted": 10,
            "formCompletionTime": 120,
        }
        assert calculate_engagement_score(features) == pytest.approx(1.0)

    def test_completion_time_outside_window_adds_nothing(self):
        assert calculate_engagement_score({"formCompletionTime": 30}) == 0.0
        assert calculate_engagement_score({"formCompletionTime": 300}) == pytest.approx(0.2)

    def test_zero_valued_factor_is_unobserved(self):
        assert calculate_engagement_score(
            {"formFieldsCompleted": 0, "requiredFieldsCompleted": 5}
        ) == 0.0


class TestDecisionStage:
    @pytest.mark.parametrize(
        "features, stage",
        [
            ({}, "awareness"),
            ({"pageViews": 2}, "awareness"),
            ({"pageViews": 4}, "consideration"),
            ({"pageViews": 7}, "evaluation"),
            ({"pageViews": 7, "sessionDuration": 700}, "decision"),
            ({"pageViews": 7, "formFieldsCompleted": 9}, "decision"),
            ({"sessionDuration": 100}, "evaluation"),
        ],
    )
    def test_stage(self, features, stage):
        assert predict_decision_stage(features) == stage

    def test_every_stage_is_a_funnel_stage(self):
        samples = [{}, {"pageViews": 4}, {"pageViews": 7}, {"sessionDuration": 700}]
        stages = [predict_decision_stage(features) for features in samples]

        assert stages == list(DECISION_STAGES)


class TestContextualTags:
    def test_stage_tag_always_present(self):
        assert _tag_names() == ["decision_stage_awareness"]

    def test_highly_engaged(self):
        names = _tag_names(
            features={
                "sessionDuration": 600,
                "pageViews": 8,
                "formFieldsCompleted": 10,
                "requiredFieldsCompleted": 10,
                "formCompletionTime": 120,
            }
        )
        assert "highly_engaged" in names
        assert "moderately_engaged" not in names

    def test_moderately_engaged(self):
        names = _tag_names(
            features={
                "sessionDuration": 600,
                "pageViews": 8,
                "formCompletionTime": 120,
            }
        )
        assert "moderately_engaged" in names

    @pytest.mark.parametrize(
        "features, expected",
        [
            ({"timeOfDay": 22}, True),
            ({"timeOfDay": 6}, True),
            ({"timeOfDay": 12}, False),
            ({"timestamp": "2024-03-01T23:15:00Z"}, True),
            ({"timestamp": "2024-03-01T14:15:00Z"}, False),
            ({"timestamp": "not a date"}, False),
        ],
    )
    def test_off_hours(self, features, expected):
        assert ("off_hours_visitor" in _tag_names(features=features)) is expected

    def test_ai_signals(self):
        tags = generate_contextual_tags(
            LeadContext(
                lead_id="l1",
                ai_score={"conversionProbability": 0.85, "fraudRiskScore": 0.65},
            )
        )
        by_name = {t.tag: t for t in tags}

        assert by_name["ai_predicted_convert"].priority == 90
        assert by_name["ai_predicted_convert"].applied_rules == ["ai_conversion_prediction"]
        assert by_name["elevated_risk"].category == "risk"
        assert by_name["elevated_risk"].priority == 95

    def test_ai_thresholds_are_exclusive(self):
        names = _tag_names(ai_score={"conversionProbability": 0.8, "fraudRiskScore": 0.6})
        assert "ai_predicted_convert" not in names
        assert "elevated_risk" not in names
