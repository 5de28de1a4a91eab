"""Heuristic tags derived from behavioural features.

These are not expressible as simple table-driven rules (composite
scores, time parsing, a funnel-stage decision) so they run as a fixed
second pass after the tag rules.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from app.core.constants import (
    AI_CONVERT_PROBABILITY,
    AI_ELEVATED_FRAUD_RISK,
    COMPARISON_SHOPPER_PAGE_VIEWS,
    DECISION_STAGES,
    DEEP_RESEARCH_SESSION_SECONDS,
    HIGH_ENGAGEMENT_SCORE,
    MODERATE_ENGAGEMENT_SCORE,
    OFF_HOURS_END,
    OFF_HOURS_START,
)
from app.schemas.common import TagCategory
from app.schemas.qualification import LeadContext, TagResult
from app.services.conditions import try_coerce_number


def _number(source: Optional[Mapping[str, Any]], key: str) -> Optional[float]:
    if not isinstance(source, Mapping):
        return None
    return try_coerce_number(source.get(key))


def _present(value: Optional[float]) -> bool:
    """Zero and missing both mean the signal was not observed."""
    return value is not None and value != 0


def calculate_engagement_score(features: Optional[Mapping[str, Any]]) -> float:
    """Weighted sum of up to four engagement factors (max 1.0).

    Factors, each only when observed:
        - session duration, capped at 10 minutes      (0.30)
        - page views, capped at 8                     (0.25)
        - required / total form fields completed      (0.25)
        - completion time within 60–300 seconds       (0.20)
    """
    if not features:
        return 0.0

    score = 0.0

    session = _number(features, "sessionDuration")
    if _present(session):
        score += min(session / 600, 1) * 0.3

    page_views = _number(features, "pageViews")
    if _present(page_views):
        score += min(page_views / 8, 1) * 0.25

    total_fields = _number(features, "formFieldsCompleted")
    required_fields = _number(features, "requiredFieldsCompleted")
    if _present(total_fields) and _present(required_fields):
        score += (required_fields / total_fields) * 0.25

    completion_time = _number(features, "formCompletionTime")
    if _present(completion_time):
        score += 0.2 if 60 <= completion_time <= 300 else 0

    return score


def predict_decision_stage(features: Optional[Mapping[str, Any]]) -> str:
    """Place the lead in the buying funnel from its browsing depth."""
    awareness, consideration, evaluation, decision = DECISION_STAGES
    if not features:
        return awareness

    page_views = _number(features, "pageViews")
    session = _number(features, "sessionDuration")
    fields = _number(features, "formFieldsCompleted")

    if page_views is not None and page_views <= 2:
        return awareness
    if page_views is not None and page_views <= 5:
        return consideration
    if (session is not None and session > 600) or (fields is not None and fields > 8):
        return decision
    return evaluation


def _visit_hour(features: Mapping[str, Any]) -> Optional[float]:
    hour = _number(features, "timeOfDay")
    if hour is not None:
        return hour
    timestamp = features.get("timestamp")
    if isinstance(timestamp, str):
        try:
            return float(datetime.fromisoformat(timestamp.replace("Z", "+00:00")).hour)
        except ValueError:
            return None
    return None


def _tag(
    tag: str,
    confidence: float,
    reasoning: str,
    category: TagCategory,
    priority: int,
    source: str,
) -> TagResult:
    return TagResult(
        tag=tag,
        confidence=confidence,
        reasoning=reasoning,
        category=category.value,
        priority=priority,
        applied_rules=[source],
    )


def generate_contextual_tags(context: LeadContext) -> List[TagResult]:
    """Run every heuristic in a fixed order; each decides independently."""
    features: Dict[str, Any] = context.features or {}
    ai_score = context.ai_score or {}
    tags: List[TagResult] = []

    session = _number(features, "sessionDuration")
    if session is not None and session > DEEP_RESEARCH_SESSION_SECONDS:
        tags.append(
            _tag(
                "deep_researcher",
                0.85,
                "Extended session duration indicates thorough research behavior",
                TagCategory.BEHAVIOR,
                70,
                "ai_behavioral_analysis",
            )
        )

    page_views = _number(features, "pageViews")
    if page_views is not None and page_views > COMPARISON_SHOPPER_PAGE_VIEWS:
        tags.append(
            _tag(
                "comparison_shopper",
                0.80,
                "High page view count suggests comparison shopping behavior",
                TagCategory.BEHAVIOR,
                65,
                "ai_behavioral_analysis",
            )
        )

    engagement = calculate_engagement_score(features)
    if engagement > HIGH_ENGAGEMENT_SCORE:
        tags.append(
            _tag(
                "highly_engaged",
                0.90,
                "Multiple high-engagement indicators detected",
                TagCategory.ENGAGEMENT,
                80,
                "ai_engagement_analysis",
            )
        )
    elif engagement > MODERATE_ENGAGEMENT_SCORE:
        tags.append(
            _tag(
                "moderately_engaged",
                0.75,
                "Good engagement indicators present",
                TagCategory.ENGAGEMENT,
                60,
                "ai_engagement_analysis",
            )
        )

    hour = _visit_hour(features)
    if hour is not None and (hour >= OFF_HOURS_START or hour <= OFF_HOURS_END):
        tags.append(
            _tag(
                "off_hours_visitor",
                0.70,
                "Activity during off-business hours",
                TagCategory.TIMING,
                55,
                "ai_timing_analysis",
            )
        )

    conversion = _number(ai_score, "conversionProbability")
    if conversion is not None and conversion > AI_CONVERT_PROBABILITY:
        tags.append(
            _tag(
                "ai_predicted_convert",
                0.95,
                "AI model predicts high conversion probability",
                TagCategory.QUALITY,
                90,
                "ai_conversion_prediction",
            )
        )

    fraud_risk = _number(ai_score, "fraudRiskScore")
    if fraud_risk is not None and fraud_risk > AI_ELEVATED_FRAUD_RISK:
        tags.append(
            _tag(
                "elevated_risk",
                0.85,
                "AI fraud detection indicates elevated risk",
                TagCategory.RISK,
                95,
                "ai_risk_analysis",
            )
        )

    stage = predict_decision_stage(features)
    tags.append(
        _tag(
            f"decision_stage_{stage}",
            0.75,
            f"AI analysis suggests {stage} decision stage",
            TagCategory.BEHAVIOR,
            70,
            "ai_decision_stage_analysis",
        )
    )

    return tags
