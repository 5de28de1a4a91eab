"""Repository layer.

``RuleRepository`` and its subclasses hold the live, in-memory rule
sets the engines read; ``RuleDefinitionRepository`` is the database
store they are loaded from and written through to.
"""

from app.repositories.rule_repository import (
    QualificationRuleRepository,
    RuleRepository,
    TagRuleRepository,
)
from app.repositories.rule_definition_repository import RuleDefinitionRepository

__all__ = [
    "RuleRepository",
    "QualificationRuleRepository",
    "TagRuleRepository",
    "RuleDefinitionRepository",
]
