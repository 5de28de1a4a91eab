import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

from app.core.constants import (
    MATCHED_SCORE_BASE,
    QUALIFICATION_OPERATORS,
    TAGGING_OPERATORS,
    UNMATCHED_RULE_SCORE,
)
from app.schemas.rules import Condition
from app.services.conditions import (
    evaluate_condition,
    extract_field,
    format_value,
    try_coerce_number,
)

logger = logging.getLogger(__name__)

ConditionEvaluator = Callable[[Any, str, Any], bool]


@dataclass(frozen=True)
class RuleMatch:
    """How well one rule's conditions fit a lead record."""

    matched: bool
    score: float
    weight: float
    match_ratio: float
    conditions_met: int
    reasoning: List[str] = field(default_factory=list)
    diagnostics: List[str] = field(default_factory=list)


def qualification_evaluator(field_value: Any, operator: str, expected: Any) -> bool:
    """Qualification semantics: no ``range``, case-sensitive ``eq``."""
    return evaluate_condition(
        field_value, operator, expected, operators=QUALIFICATION_OPERATORS
    )


def tagging_evaluator(field_value: Any, operator: str, expected: Any) -> bool:
    """Tagging semantics: ``range`` allowed, case-insensitive string ``eq``."""
    return evaluate_condition(
        field_value,
        operator,
        expected,
        operators=TAGGING_OPERATORS,
        case_insensitive_eq=True,
    )


def _diagnose(condition: Condition, index: int, allowed) -> List[str]:
    problems = []
    if condition.operator not in allowed:
        problems.append(
            f"condition {index + 1} ({condition.field}): "
            f"unsupported operator '{condition.operator}'"
        )
    elif condition.operator in ("gt", "gte", "lt", "lte") and (
        try_coerce_number(condition.value) is None
    ):
        problems.append(
            f"condition {index + 1} ({condition.field}): "
            f"non-numeric operand '{format_value(condition.value)}'"
        )
    return problems


def condition_diagnostics(
    conditions: Sequence[Condition], allowed_operators=TAGGING_OPERATORS
) -> List[str]:
    """Describe every condition that can never match; empty when all are sound."""
    problems: List[str] = []
    for index, condition in enumerate(conditions):
        problems.extend(_diagnose(condition, index, allowed_operators))
    return problems


def match_conditions(
    conditions: Sequence[Condition],
    record: Dict[str, Any],
    *,
    threshold: float,
    score_scale: float,
    evaluate: ConditionEvaluator,
    allowed_operators=TAGGING_OPERATORS,
    bracket_lists: bool = False,
) -> RuleMatch:
    """Evaluate every condition and decide whether the rule matches.

    The rule matches once ``conditions_met / len(conditions)`` reaches
    *threshold*; a rule without conditions never matches.  Only matched
    conditions contribute weight and a reasoning line, in condition order.
    """
    total = len(conditions)
    conditions_met = 0
    weight = 0.0
    reasoning: List[str] = []
    diagnostics: List[str] = []

    for index, condition in enumerate(conditions):
        diagnostics.extend(_diagnose(condition, index, allowed_operators))
        field_value = extract_field(record, condition.field)
        if evaluate(field_value, condition.operator, condition.value):
            conditions_met += 1
            weight += condition.weight
            reasoning.append(
                f"{condition.field} {condition.operator} "
                f"{format_value(condition.value, bracket_lists)}"
            )

    for line in diagnostics:
        logger.debug("Malformed condition treated as not matched: %s", line)

    ratio = conditions_met / total if total else 0.0
    matched = total > 0 and ratio >= threshold
    score = (
        MATCHED_SCORE_BASE + (ratio - threshold) * score_scale
        if matched
        else UNMATCHED_RULE_SCORE
    )
    return RuleMatch(
        matched=matched,
        score=score,
        weight=weight,
        match_ratio=ratio,
        conditions_met=conditions_met,
        reasoning=reasoning,
        diagnostics=diagnostics,
    )
