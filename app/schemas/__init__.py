"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    Operator as Operator,
    ActionType as ActionType,
    TagCategory as TagCategory,
    ActionPriority as ActionPriority,
    DecisionStatus as DecisionStatus,
    CamelModel as CamelModel,
    SuccessResponse as SuccessResponse,
)

# Rule schemas
from app.schemas.rules import (
    Condition as Condition,
    Action as Action,
    QualifyAction as QualifyAction,
    DisqualifyAction as DisqualifyAction,
    ReviewAction as ReviewAction,
    TagAction as TagAction,
    RouteAction as RouteAction,
    ScoreAdjustmentAction as ScoreAdjustmentAction,
    QualificationRule as QualificationRule,
    TagRule as TagRule,
)

# Evaluation schemas
from app.schemas.qualification import (
    LeadContext as LeadContext,
    RequiredAction as RequiredAction,
    QualificationResult as QualificationResult,
    TagResult as TagResult,
)

# Routing schemas
from app.schemas.routing import (
    AgentSkills as AgentSkills,
    AgentAvailability as AgentAvailability,
    AlternativeAgent as AlternativeAgent,
    FollowUpStrategy as FollowUpStrategy,
    RoutingPlan as RoutingPlan,
)

# Endpoint schemas
from app.schemas.decision import (
    LeadDecisionRequest as LeadDecisionRequest,
    RouteLeadRequest as RouteLeadRequest,
    LeadDecisionResponse as LeadDecisionResponse,
    TagGenerationResponse as TagGenerationResponse,
    TagSummary as TagSummary,
    TagRecommendation as TagRecommendation,
)
from app.schemas.admin import (
    RuleCreateRequest as RuleCreateRequest,
    RuleUpdateRequest as RuleUpdateRequest,
    RuleStatistics as RuleStatistics,
    TagRuleStatistics as TagRuleStatistics,
    RuleListResponse as RuleListResponse,
    RuleResponse as RuleResponse,
    TagRuleListResponse as TagRuleListResponse,
    TagRuleResponse as TagRuleResponse,
    RuleDeletedResponse as RuleDeletedResponse,
)
