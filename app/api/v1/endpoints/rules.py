from fastapi import APIRouter, Depends, Request

from app.core.rate_limit import limiter
from app.schemas.admin import (
    RuleCreateRequest,
    RuleDeletedResponse,
    RuleListResponse,
    RuleResponse,
    RuleUpdateRequest,
)
from app.services.rule_admin_service import RuleAdminService
from app.api.deps import get_rule_admin_service

router = APIRouter(prefix="/rules", tags=["Qualification Rules"])


@router.get("", response_model=RuleListResponse)
@limiter.limit("100/minute")
async def list_rules(
    request: Request,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> RuleListResponse:
    """List qualification rules by descending priority, with statistics."""
    return RuleListResponse(
        rules=service.list_rules(),
        statistics=service.rule_statistics(),
    )


@router.post("", response_model=RuleResponse, status_code=201)
@limiter.limit("20/minute")
async def create_rule(
    request: Request,
    request_body: RuleCreateRequest,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> RuleResponse:
    rule = await service.create_rule(request_body.rule)
    return RuleResponse(
        rule=rule, message="Qualification rule created successfully"
    )


@router.put("/{rule_id}", response_model=RuleResponse)
@limiter.limit("30/minute")
async def update_rule(
    request: Request,
    rule_id: str,
    request_body: RuleUpdateRequest,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> RuleResponse:
    """Merge ``updates`` into an existing rule; the id cannot change."""
    rule = await service.update_rule(rule_id, request_body.updates)
    return RuleResponse(
        rule=rule, message="Qualification rule updated successfully"
    )


@router.delete("/{rule_id}", response_model=RuleDeletedResponse)
@limiter.limit("10/minute")
async def delete_rule(
    request: Request,
    rule_id: str,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> RuleDeletedResponse:
    await service.delete_rule(rule_id)
    return RuleDeletedResponse(
        rule_id=rule_id, message="Qualification rule deleted successfully"
    )
