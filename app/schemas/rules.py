"""Rule-set schemas shared by the qualification and tagging engines."""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated

from app.schemas.common import TagCategory


class Condition(BaseModel):
    """One weighted test of a field path against an expected value.

    ``operator`` is kept as a plain string so that a rule stored with an
    unknown operator still loads and simply never matches.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    value: Any = None
    weight: float = 0


# ---------------------------------------------------------------------------
# Actions, one variant per kind, discriminated on ``type``
# ---------------------------------------------------------------------------


class _ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    reasoning: str


class QualifyAction(_ActionBase):
    type: Literal["qualify"] = "qualify"
    value: Any = True


class DisqualifyAction(_ActionBase):
    type: Literal["disqualify"] = "disqualify"
    value: Any = True


class ReviewAction(_ActionBase):
    type: Literal["review"] = "review"
    value: Any = True


class TagAction(_ActionBase):
    type: Literal["tag"] = "tag"
    value: Union[str, List[str]]

    @property
    def tags(self) -> List[str]:
        if isinstance(self.value, str):
            return [self.value]
        return list(self.value)


class RouteAction(_ActionBase):
    type: Literal["route"] = "route"
    value: str


class ScoreAdjustmentAction(_ActionBase):
    type: Literal["score_adjustment"] = "score_adjustment"
    value: Any = 0


Action = Annotated[
    Union[
        QualifyAction,
        DisqualifyAction,
        ReviewAction,
        TagAction,
        RouteAction,
        ScoreAdjustmentAction,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class QualificationRule(BaseModel):
    """A prioritised rule whose actions feed the qualification decision."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    enabled: bool = True
    priority: float = 50
    conditions: List[Condition]
    actions: List[Action]
    created: Optional[datetime] = None
    updated: Optional[datetime] = None


class TagRule(BaseModel):
    """A prioritised rule mapping matching leads to a single tag."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    tag: str
    priority: float = 50
    conditions: List[Condition]
    confidence: float = Field(..., ge=0, le=1)
    category: TagCategory
    enabled: bool = True
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
