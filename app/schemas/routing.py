from typing import List, Optional

from pydantic import Field

from app.schemas.common import ActionPriority, CamelModel
from app.schemas.qualification import RequiredAction


class AgentSkills(CamelModel):
    credit_specialist: bool = False
    high_value_deals: bool = False
    difficult_cases: bool = False
    new_lead_expert: bool = False
    closing_expert: bool = False


class AgentAvailability(CamelModel):
    """Snapshot of one sales agent as supplied by the caller.

    ``avg_response_time`` is in minutes; ``conversion_rate`` is 0–1.
    """

    id: str
    name: str
    email: Optional[str] = None
    status: str = "available"
    active_leads: int = Field(0, ge=0)
    max_leads: int = Field(10, gt=0)
    conversion_rate: float = Field(0, ge=0, le=1)
    avg_response_time: float = Field(60, ge=0)
    avg_deal_value: float = 0
    satisfaction_score: float = Field(0, ge=0, le=5)
    lead_types: List[str] = Field(default_factory=list)
    skills: AgentSkills = Field(default_factory=AgentSkills)


class AlternativeAgent(CamelModel):
    agent_id: str
    name: str
    confidence: float
    reasoning: str


class FollowUpStrategy(CamelModel):
    primary_channel: str
    timing: str
    fallback_actions: List[str] = Field(default_factory=list)


class RoutingPlan(CamelModel):
    """Agent selection plus the follow-up plan for one lead.

    ``agent_id`` is ``None`` when routing failed or no agent could take
    the lead; the qualification decision stands regardless.
    """

    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    confidence: float = 0
    reasoning: List[str] = Field(default_factory=list)
    alternatives: List[AlternativeAgent] = Field(default_factory=list)
    urgency_level: ActionPriority = ActionPriority.low
    estimated_response_time: Optional[int] = None
    follow_up: Optional[FollowUpStrategy] = None
    routing_recommendation: Optional[str] = None
    actions: List[RequiredAction] = Field(default_factory=list)
