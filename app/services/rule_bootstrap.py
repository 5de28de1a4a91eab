"""Startup wiring of the live rule sets.

The in-memory repositories always start from the bundled defaults, so
the engines can serve requests before (or without) the database.  When
persistence is enabled the stored definitions then replace them.
"""

import logging
from typing import Any, Dict, List, Sequence, Tuple, Type, TypeVar

from pydantic import ValidationError

from app.core.constants import QUALIFICATION_OPERATORS, TAGGING_OPERATORS
from app.core.default_rules import DEFAULT_QUALIFICATION_RULES, DEFAULT_TAG_RULES
from app.repositories.rule_definition_repository import (
    QUALIFICATION_KIND,
    TAG_KIND,
    RuleDefinitionRepository,
)
from app.repositories.rule_repository import (
    AnyRuleRepository,
    QualificationRuleRepository,
    TagRuleRepository,
)
from app.schemas.rules import QualificationRule, TagRule
from app.services.rule_matcher import condition_diagnostics

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", QualificationRule, TagRule)

_OPERATORS = {QUALIFICATION_KIND: QUALIFICATION_OPERATORS, TAG_KIND: TAGGING_OPERATORS}


def _parse(
    model: Type[ModelT], definitions: Sequence[Dict[str, Any]], kind: str
) -> List[ModelT]:
    rules: List[ModelT] = []
    for definition in definitions:
        try:
            rule = model.model_validate(definition)
        except ValidationError:
            logger.warning(
                "Skipping unreadable %s rule %s", kind, definition.get("id", "?")
            )
            continue
        for problem in condition_diagnostics(rule.conditions, _OPERATORS[kind]):
            logger.warning("Loaded %s rule %s never matches on %s", kind, rule.id, problem)
        rules.append(rule)
    return rules


def load_default_rules(
    qualification_repo: QualificationRuleRepository,
    tag_repo: TagRuleRepository,
) -> None:
    """Reset both repositories to the bundled default rule sets."""
    qualification_repo.replace_all(
        _parse(QualificationRule, DEFAULT_QUALIFICATION_RULES, QUALIFICATION_KIND)
    )
    tag_repo.replace_all(_parse(TagRule, DEFAULT_TAG_RULES, TAG_KIND))


def build_rule_repositories() -> Tuple[QualificationRuleRepository, TagRuleRepository]:
    qualification_repo = QualificationRuleRepository()
    tag_repo = TagRuleRepository()
    load_default_rules(qualification_repo, tag_repo)
    return qualification_repo, tag_repo


async def sync_rules_from_store(
    store: RuleDefinitionRepository,
    qualification_repo: QualificationRuleRepository,
    tag_repo: TagRuleRepository,
    seed_defaults: bool = True,
) -> None:
    """Replace the live rule sets with the stored definitions.

    With *seed_defaults*, an empty store is first populated with the
    bundled defaults.  A kind with nothing stored keeps its current rules.
    """
    plan: List[Tuple[str, Type, Sequence[Dict[str, Any]], AnyRuleRepository]] = [
        (QUALIFICATION_KIND, QualificationRule, DEFAULT_QUALIFICATION_RULES, qualification_repo),
        (TAG_KIND, TagRule, DEFAULT_TAG_RULES, tag_repo),
    ]

    if seed_defaults:
        for kind, _, defaults, _ in plan:
            await store.seed_if_empty(kind, defaults)
        await store.commit()

    for kind, model, _, repo in plan:
        rules = _parse(model, await store.list_definitions(kind), kind)
        if rules:
            repo.replace_all(rules)
            logger.info("Loaded %d %s rules from the rule store", len(rules), kind)
