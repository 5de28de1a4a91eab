from typing import Dict, FrozenSet, List

from app.schemas.common import ActionType, Operator, TagCategory

# Operators understood by each engine.  ``range`` is a tagging-only extension.
TAGGING_OPERATORS: FrozenSet[str] = frozenset(op.value for op in Operator)
QUALIFICATION_OPERATORS: FrozenSet[str] = TAGGING_OPERATORS - {Operator.RANGE.value}

ACTION_TYPES: FrozenSet[str] = frozenset(a.value for a in ActionType)
TAG_CATEGORIES: FrozenSet[str] = frozenset(c.value for c in TagCategory)

# Fraction of a rule's conditions that must hold for the rule to match
QUALIFICATION_MATCH_THRESHOLD: float = 0.7
TAGGING_MATCH_THRESHOLD: float = 0.6

# Matched rules score on an 80-100 band: 80 + (ratio - threshold) * scale
MATCHED_SCORE_BASE: float = 80.0
QUALIFICATION_SCORE_SCALE: float = 66.67
TAGGING_SCORE_SCALE: float = 50.0
UNMATCHED_RULE_SCORE: float = 30.0

# Final qualification policy
HIGH_SCORE_THRESHOLD: int = 75
HIGH_CONFIDENCE_THRESHOLD: float = 0.8
AI_BORDERLINE_SCORE: int = 60
AI_CONVERSION_THRESHOLD: float = 0.6
DEFAULT_QUALIFY_SCORE: int = 70
NURTURE_SCORE_THRESHOLD: int = 50
URGENT_ROUTING_SCORE: int = 85

# Confidence saturates once matched weight reaches this total
CONFIDENCE_WEIGHT_DIVISOR: float = 100.0

RULE_PRIORITY_MIN: float = 0
RULE_PRIORITY_MAX: float = 100
DEFAULT_RULE_PRIORITY: float = 50

# Contextual tag heuristics
DEEP_RESEARCH_SESSION_SECONDS: int = 900
COMPARISON_SHOPPER_PAGE_VIEWS: int = 10
HIGH_ENGAGEMENT_SCORE: float = 0.8
MODERATE_ENGAGEMENT_SCORE: float = 0.6
OFF_HOURS_START: int = 20
OFF_HOURS_END: int = 6
AI_CONVERT_PROBABILITY: float = 0.8
AI_ELEVATED_FRAUD_RISK: float = 0.6
HIGH_CONFIDENCE_TAG: float = 0.8

DECISION_STAGES: List[str] = ["awareness", "consideration", "evaluation", "decision"]

# Routing
AGENT_AVAILABLE_STATUS: str = "available"
URGENCY_TIMING: Dict[str, str] = {
    "urgent": "immediate (within 15 minutes)",
    "high": "within 1 hour",
    "medium": "within 4 hours",
    "low": "within 24 hours",
}
URGENCY_RESPONSE_CAP_MINUTES: Dict[str, int] = {
    "urgent": 15,
    "high": 60,
    "medium": 120,
}
