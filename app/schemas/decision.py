"""Request/response schemas for the lead decision endpoints."""

from typing import Dict, List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, DecisionStatus, SuccessResponse
from app.schemas.qualification import LeadContext, QualificationResult, TagResult
from app.schemas.routing import AgentAvailability, RoutingPlan


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class LeadDecisionRequest(LeadContext):
    """Lead context plus an optional agent roster for routing."""

    agents: List[AgentAvailability] = Field(default_factory=list)

    def to_context(self) -> LeadContext:
        return LeadContext.model_validate(self.model_dump(exclude={"agents"}))


class RouteLeadRequest(LeadDecisionRequest):
    agents: List[AgentAvailability] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TagSummary(CamelModel):
    total_tags: int
    high_confidence_tags: int
    categories_represented: int
    top_category: str
    average_confidence: float


class TagRecommendation(CamelModel):
    type: str
    recommendation: str
    reasoning: str
    priority: str


class TagGenerationResponse(SuccessResponse):
    lead_id: str
    tags: List[TagResult]
    tags_by_category: Dict[str, List[TagResult]]
    summary: TagSummary
    recommendations: List[TagRecommendation]


class LeadDecisionResponse(SuccessResponse):
    lead_id: str
    status: DecisionStatus
    qualification: QualificationResult
    tags: List[TagResult]
    tag_summary: TagSummary
    routing: Optional[RoutingPlan] = None
