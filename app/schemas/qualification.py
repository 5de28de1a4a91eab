"""Per-lead evaluation inputs and outputs."""

from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.common import ActionPriority, CamelModel


class LeadContext(CamelModel):
    """Everything the engines may read about one lead at decision time.

    ``ai_score`` and ``anomaly_detection`` are produced upstream and are
    opaque here beyond ``conversionProbability``, ``fraudRiskScore``,
    ``flagged`` and ``anomalyScore``.
    """

    lead_id: str
    features: Dict[str, Any] = Field(default_factory=dict)
    ai_score: Optional[Dict[str, Any]] = None
    anomaly_detection: Optional[Dict[str, Any]] = None
    custom_fields: Optional[Dict[str, Any]] = None

    def as_record(self) -> Dict[str, Any]:
        """Return the camelCase record that rule field paths walk."""
        return {
            "leadId": self.lead_id,
            "features": self.features,
            "aiScore": self.ai_score,
            "anomalyDetection": self.anomaly_detection,
            "customFields": self.custom_fields,
        }


class RequiredAction(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    action: str
    priority: ActionPriority
    deadline: str


class QualificationResult(CamelModel):
    """Outcome of one qualification pass; immutable once returned."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    qualified: bool
    confidence: float = Field(..., ge=0, le=1)
    score: float
    reasoning: List[str] = Field(default_factory=list)
    applied_rules: List[str] = Field(default_factory=list)
    suggested_tags: List[str] = Field(default_factory=list)
    routing_recommendation: Optional[str] = None
    required_actions: List[RequiredAction] = Field(default_factory=list)
    vetoed: bool = False


class TagResult(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    tag: str
    confidence: float
    reasoning: str
    category: str
    priority: float
    applied_rules: List[str] = Field(default_factory=list)
