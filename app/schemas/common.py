from enum import Enum
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Operator(str, Enum):
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"
    RANGE = "range"


class ActionType(str, Enum):
    QUALIFY = "qualify"
    DISQUALIFY = "disqualify"
    REVIEW = "review"
    TAG = "tag"
    ROUTE = "route"
    SCORE_ADJUSTMENT = "score_adjustment"


class TagCategory(str, Enum):
    QUALITY = "quality"
    BEHAVIOR = "behavior"
    DEMOGRAPHICS = "demographics"
    RISK = "risk"
    SOURCE = "source"
    ENGAGEMENT = "engagement"
    TIMING = "timing"
    CUSTOM = "custom"


class ActionPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class DecisionStatus(str, Enum):
    qualified = "qualified"
    requires_review = "requires_review"
    nurture = "nurture"
    disqualified = "disqualified"


class CamelModel(BaseModel):
    """Base for payloads exchanged as camelCase JSON.

    Attributes stay snake_case in Python; both spellings are accepted
    on input and responses serialise by alias.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(CamelModel):
    """Generic success response base."""

    success: bool = True
