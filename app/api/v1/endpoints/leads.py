from fastapi import APIRouter, Depends, Request

from app.core.rate_limit import limiter
from app.schemas.decision import (
    LeadDecisionRequest,
    LeadDecisionResponse,
    RouteLeadRequest,
    TagGenerationResponse,
)
from app.schemas.qualification import LeadContext
from app.services.lead_decision_service import LeadDecisionService
from app.api.deps import get_lead_decision_service

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.post("/qualify", response_model=LeadDecisionResponse)
@limiter.limit("60/minute")
async def qualify_lead(
    request: Request,
    request_body: LeadDecisionRequest,
    service: LeadDecisionService = Depends(get_lead_decision_service),
) -> LeadDecisionResponse:
    """Qualify and tag a lead and derive its status.

    When ``agents`` are supplied the response also carries a routing
    plan; a routing failure never changes the qualification outcome.
    """
    return await service.decide(request_body.to_context(), request_body.agents)


@router.post("/tags", response_model=TagGenerationResponse)
@limiter.limit("60/minute")
async def generate_tags(
    request: Request,
    request_body: LeadContext,
    service: LeadDecisionService = Depends(get_lead_decision_service),
) -> TagGenerationResponse:
    """Generate tags grouped by category, with a summary and next steps."""
    return service.generate_tags(request_body)


@router.post("/route", response_model=LeadDecisionResponse)
@limiter.limit("60/minute")
async def route_lead(
    request: Request,
    request_body: RouteLeadRequest,
    service: LeadDecisionService = Depends(get_lead_decision_service),
) -> LeadDecisionResponse:
    """Qualify, tag and route a lead across the supplied agents."""
    return await service.decide(request_body.to_context(), request_body.agents)
