from app.models.base import Base
from app.models.rule_definition import RuleDefinition

__all__ = [
    "Base",
    "RuleDefinition",
]
