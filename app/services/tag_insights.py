"""Aggregate views over a lead's tags: grouping, summary, next steps."""

from collections import Counter
from typing import Dict, List, Sequence

from app.core.constants import HIGH_CONFIDENCE_TAG
from app.schemas.common import TagCategory
from app.schemas.decision import TagRecommendation, TagSummary
from app.schemas.qualification import TagResult


def group_by_category(tags: Sequence[TagResult]) -> Dict[str, List[TagResult]]:
    grouped: Dict[str, List[TagResult]] = {}
    for tag in tags:
        grouped.setdefault(tag.category, []).append(tag)
    return grouped


def summarize_tags(tags: Sequence[TagResult]) -> TagSummary:
    """Counts, most common category and mean confidence (2 decimals)."""
    counts = Counter(tag.category for tag in tags)
    # most_common keeps first-seen order on ties
    top_category = counts.most_common(1)[0][0] if counts else "none"
    average = sum(tag.confidence for tag in tags) / len(tags) if tags else 0.0

    return TagSummary(
        total_tags=len(tags),
        high_confidence_tags=sum(
            1 for tag in tags if tag.confidence >= HIGH_CONFIDENCE_TAG
        ),
        categories_represented=len(counts),
        top_category=top_category,
        average_confidence=round(average, 2),
    )


def recommend_from_tags(
    tags: Sequence[TagResult], summary: TagSummary
) -> List[TagRecommendation]:
    """Suggest sales follow-ups from tag patterns.

    Falls back to a single standard follow-up when no pattern applies.
    """
    recommendations: List[TagRecommendation] = []
    categories = Counter(tag.category for tag in tags)
    names = {tag.tag for tag in tags}

    if summary.high_confidence_tags >= 3:
        recommendations.append(
            TagRecommendation(
                type="lead_prioritization",
                recommendation="Prioritize this lead for immediate follow-up",
                reasoning=(
                    f"{summary.high_confidence_tags} high-confidence tags "
                    "indicate strong lead quality"
                ),
                priority="high",
            )
        )

    if categories[TagCategory.RISK.value]:
        recommendations.append(
            TagRecommendation(
                type="risk_mitigation",
                recommendation="Conduct additional verification before proceeding",
                reasoning="Risk-related tags detected, suggesting need for careful review",
                priority="high",
            )
        )

    if categories[TagCategory.QUALITY.value] >= 2:
        recommendations.append(
            TagRecommendation(
                type="fast_track",
                recommendation="Fast-track this lead through qualification process",
                reasoning="Multiple quality indicators suggest high conversion potential",
                priority="medium",
            )
        )

    if any(
        tag.tag == "comparison_shopper" and tag.category == TagCategory.BEHAVIOR.value
        for tag in tags
    ):
        recommendations.append(
            TagRecommendation(
                type="sales_approach",
                recommendation=(
                    "Use comparison-focused sales approach with competitive analysis"
                ),
                reasoning="Behavioral patterns suggest lead is actively comparing options",
                priority="medium",
            )
        )

    if "off_hours_visitor" in names:
        recommendations.append(
            TagRecommendation(
                type="contact_timing",
                recommendation="Consider evening or weekend contact windows",
                reasoning=(
                    "Lead shows off-hours activity, may prefer non-traditional "
                    "contact times"
                ),
                priority="low",
            )
        )

    if not recommendations:
        recommendations.append(
            TagRecommendation(
                type="standard_follow_up",
                recommendation="Proceed with standard lead nurturing sequence",
                reasoning=(
                    "No specific high-priority patterns detected, follow standard "
                    "process"
                ),
                priority="low",
            )
        )

    return recommendations
