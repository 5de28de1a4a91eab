"""Rule-administration request/response schemas.

Rule bodies are accepted as raw JSON objects so that validation can
report every problem field-by-field instead of stopping at the first
type error.
"""

from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.common import CamelModel, SuccessResponse
from app.schemas.rules import QualificationRule, TagRule


class RuleCreateRequest(CamelModel):
    rule: Dict[str, Any]


class RuleUpdateRequest(CamelModel):
    updates: Dict[str, Any] = Field(..., min_length=1)


class RuleStatistics(CamelModel):
    total: int
    enabled: int
    disabled: int
    average_priority: float
    rule_types: Dict[str, int] = Field(default_factory=dict)


class TagRuleStatistics(CamelModel):
    total: int
    enabled: int
    disabled: int
    average_priority: float
    average_confidence: float
    category_counts: Dict[str, int] = Field(default_factory=dict)


class RuleListResponse(SuccessResponse):
    rules: List[QualificationRule]
    statistics: RuleStatistics


class RuleResponse(SuccessResponse):
    rule: QualificationRule
    message: str


class TagRuleListResponse(SuccessResponse):
    rules: List[TagRule]
    statistics: TagRuleStatistics
    available_categories: List[str] = Field(default_factory=list)
    category_filter: Optional[str] = None


class TagRuleResponse(SuccessResponse):
    rule: TagRule
    message: str


class RuleDeletedResponse(SuccessResponse):
    rule_id: str
    message: str
