"""Tests for rule matching: thresholds, scoring band, reasoning, diagnostics."""

import logging

import pytest

from app.core.constants import (
    QUALIFICATION_MATCH_THRESHOLD,
    QUALIFICATION_OPERATORS,
    QUALIFICATION_SCORE_SCALE,
    TAGGING_MATCH_THRESHOLD,
    TAGGING_SCORE_SCALE,
)
from app.schemas.rules import Condition
from app.services.rule_matcher import (
    condition_diagnostics,
    match_conditions,
    qualification_evaluator,
    tagging_evaluator,
)

RECORD = {
    "features": {"creditScore": 780, "income": 40000, "sourceChannel": "referral"},
    "aiScore": None,
}

THREE_CONDITIONS = [
    Condition(field="features.creditScore", operator="gte", value=750, weight=30),
    Condition(field="features.sourceChannel", operator="in", value=["referral", "direct"], weight=20),
    Condition(field="features.income", operator="gte", value=75000, weight=25),
]


def _qualification_match(conditions):
    return match_conditions(
        conditions,
        RECORD,
        threshold=QUALIFICATION_MATCH_THRESHOLD,
        score_scale=QUALIFICATION_SCORE_SCALE,
        evaluate=qualification_evaluator,
        allowed_operators=QUALIFICATION_OPERATORS,
    )


def _tagging_match(conditions):
    return match_conditions(
        conditions,
        RECORD,
        threshold=TAGGING_MATCH_THRESHOLD,
        score_scale=TAGGING_SCORE_SCALE,
        evaluate=tagging_evaluator,
        bracket_lists=True,
    )


class TestMatchThresholds:
    def test_two_of_three_misses_qualification_threshold(self):
        match = _qualification_match(THREE_CONDITIONS)
        assert match.matched is False
        assert match.score == 30
        assert match.conditions_met == 2

    def test_two_of_three_meets_tagging_threshold(self):
        match = _tagging_match(THREE_CONDITIONS)
        assert match.matched is True
        assert match.score == pytest.approx(80 + (2 / 3 - 0.6) * 50)
        assert match.match_ratio == pytest.approx(2 / 3)

    def test_full_match_scores_top_of_band(self):
        match = _qualification_match(THREE_CONDITIONS[:2])
        assert match.matched is True
        assert match.score == pytest.approx(100, abs=0.01)
        assert match.weight == 50

    def test_rule_without_conditions_never_matches(self):
        match = _qualification_match([])
        assert match.matched is False
        assert match.weight == 0


class TestReasoning:
    def test_only_met_conditions_are_explained(self):
        match = _tagging_match(THREE_CONDITIONS)
        assert match.reasoning == [
            "features.creditScore gte 750",
            "features.sourceChannel in [referral, direct]",
        ]

    def test_qualification_lists_render_without_brackets(self):
        match = _qualification_match(THREE_CONDITIONS[:2])
        assert match.reasoning[1] == "features.sourceChannel in referral,direct"


class TestDiagnostics:
    def test_unknown_operator_is_reported_not_raised(self):
        match = _qualification_match(
            [Condition(field="features.creditScore", operator="between", value=[1, 2], weight=5)]
        )
        assert match.matched is False
        assert "unsupported operator 'between'" in match.diagnostics[0]

    def test_range_is_unsupported_for_qualification(self):
        match = _qualification_match(
            [Condition(field="features.creditScore", operator="range", value=[700, 800], weight=5)]
        )
        assert match.matched is False
        assert match.diagnostics

    def test_non_numeric_comparison_operand_is_reported(self):
        match = _qualification_match(
            [Condition(field="features.creditScore", operator="gt", value="high", weight=5)]
        )
        assert match.matched is False
        assert "non-numeric operand 'high'" in match.diagnostics[0]


class TestDiagnosticLogging:
    """Per-evaluation diagnostics stay at DEBUG; admission reports them."""

    BAD_OPERAND = [
        Condition(field="features.creditScore", operator="gt", value="high", weight=5)
    ]

    def test_evaluation_logs_malformed_conditions_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="app.services.rule_matcher"):
            _qualification_match(self.BAD_OPERAND)

        records = [r for r in caplog.records if r.name == "app.services.rule_matcher"]
        assert records
        assert all(r.levelno == logging.DEBUG for r in records)

    def test_condition_diagnostics_lists_every_problem(self):
        problems = condition_diagnostics(
            self.BAD_OPERAND
            + [Condition(field="features.income", operator="range", value=[1, 2], weight=5)],
            QUALIFICATION_OPERATORS,
        )

        assert len(problems) == 2
        assert problems[0].startswith("condition 1 (features.creditScore)")
        assert "unsupported operator 'range'" in problems[1]

    def test_sound_conditions_have_no_diagnostics(self):
        assert condition_diagnostics(THREE_CONDITIONS, QUALIFICATION_OPERATORS) == []
