"""Tests for tag grouping, summaries and recommendations."""

from app.schemas.qualification import TagResult
from app.services.tag_insights import group_by_category, recommend_from_tags, summarize_tags


def _tag(tag, category, confidence=0.9, priority=50):
    return TagResult(
        tag=tag, confidence=confidence, reasoning="r", category=category, priority=priority
    )


class TestSummary:
    def test_empty(self):
        summary = summarize_tags([])

        assert summary.total_tags == 0
        assert summary.top_category == "none"
        assert summary.average_confidence == 0.0

    def test_counts(self):
        tags = [
            _tag("a", "quality", 0.95),
            _tag("b", "quality", 0.5),
            _tag("c", "risk", 0.8),
        ]

        summary = summarize_tags(tags)

        assert summary.total_tags == 3
        assert summary.high_confidence_tags == 2
        assert summary.categories_represented == 2
        assert summary.top_category == "quality"
        assert summary.average_confidence == 0.75

    def test_group_by_category_keeps_order(self):
        grouped = group_by_category([_tag("a", "risk"), _tag("b", "quality"), _tag("c", "risk")])

        assert list(grouped) == ["risk", "quality"]
        assert [t.tag for t in grouped["risk"]] == ["a", "c"]


class TestRecommendations:
    def _types(self, tags):
        return [r.type for r in recommend_from_tags(tags, summarize_tags(tags))]

    def test_standard_follow_up_when_nothing_stands_out(self):
        assert self._types([_tag("a", "source", 0.5)]) == ["standard_follow_up"]

    def test_strong_quality_lead(self):
        tags = [
            _tag("excellent_credit", "quality"),
            _tag("high_quality", "quality"),
            _tag("high_income", "demographics"),
        ]

        assert self._types(tags) == ["lead_prioritization", "fast_track"]

    def test_risk_and_behaviour(self):
        tags = [
            _tag("elevated_risk", "risk", 0.5),
            _tag("comparison_shopper", "behavior", 0.5),
            _tag("off_hours_visitor", "timing", 0.5),
        ]

        assert self._types(tags) == ["risk_mitigation", "sales_approach", "contact_timing"]
