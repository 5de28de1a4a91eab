from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.core.rate_limit import limiter
from app.schemas.admin import (
    RuleCreateRequest,
    RuleDeletedResponse,
    RuleUpdateRequest,
    TagRuleListResponse,
    TagRuleResponse,
)
from app.services.rule_admin_service import RuleAdminService
from app.api.deps import get_rule_admin_service

router = APIRouter(prefix="/tag-rules", tags=["Tag Rules"])


@router.get("", response_model=TagRuleListResponse)
@limiter.limit("100/minute")
async def list_tag_rules(
    request: Request,
    category: Optional[str] = Query(None, description="Only rules in this category"),
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> TagRuleListResponse:
    """List tag rules; statistics always cover the full rule set."""
    return TagRuleListResponse(
        rules=service.list_tag_rules(category),
        statistics=service.tag_rule_statistics(),
        available_categories=service.available_categories(),
        category_filter=category,
    )


@router.post("", response_model=TagRuleResponse, status_code=201)
@limiter.limit("20/minute")
async def create_tag_rule(
    request: Request,
    request_body: RuleCreateRequest,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> TagRuleResponse:
    rule = await service.create_tag_rule(request_body.rule)
    return TagRuleResponse(rule=rule, message="Tag rule created successfully")


@router.put("/{rule_id}", response_model=TagRuleResponse)
@limiter.limit("30/minute")
async def update_tag_rule(
    request: Request,
    rule_id: str,
    request_body: RuleUpdateRequest,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> TagRuleResponse:
    rule = await service.update_tag_rule(rule_id, request_body.updates)
    return TagRuleResponse(rule=rule, message="Tag rule updated successfully")


@router.delete("/{rule_id}", response_model=RuleDeletedResponse)
@limiter.limit("10/minute")
async def delete_tag_rule(
    request: Request,
    rule_id: str,
    service: RuleAdminService = Depends(get_rule_admin_service),
) -> RuleDeletedResponse:
    await service.delete_tag_rule(rule_id)
    return RuleDeletedResponse(rule_id=rule_id, message="Tag rule deleted successfully")
