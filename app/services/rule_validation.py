"""Administrative validation for rule definitions.

Validation works on the raw submitted mapping (before it becomes a
model) so every problem can be reported at once, numbered the way an
operator sees the rule.
"""

from typing import Any, FrozenSet, List, Mapping

from app.core.constants import (
    ACTION_TYPES,
    QUALIFICATION_OPERATORS,
    RULE_PRIORITY_MAX,
    RULE_PRIORITY_MIN,
    TAG_CATEGORIES,
    TAGGING_OPERATORS,
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _validate_common(rule: Mapping[str, Any], operators: FrozenSet[str]) -> List[str]:
    errors: List[str] = []

    if not _non_empty_string(rule.get("id")):
        errors.append("Rule ID is required and must be a string")
    if not _non_empty_string(rule.get("name")):
        errors.append("Rule name is required and must be a string")

    conditions = rule.get("conditions")
    if not isinstance(conditions, list) or not conditions:
        errors.append("Rule must have at least one condition")
        conditions = conditions if isinstance(conditions, list) else []

    allowed = ", ".join(sorted(operators))
    for index, condition in enumerate(conditions, start=1):
        if not isinstance(condition, Mapping):
            errors.append(f"Condition {index}: must be an object")
            continue
        if not _non_empty_string(condition.get("field")):
            errors.append(f"Condition {index}: field is required and must be a string")
        if condition.get("operator") not in operators:
            errors.append(f"Condition {index}: operator must be one of {allowed}")
        if condition.get("value") is None:
            errors.append(f"Condition {index}: value is required")
        weight = condition.get("weight")
        if not _is_number(weight) or weight < 0:
            errors.append(f"Condition {index}: weight must be a positive number")

    priority = rule.get("priority")
    if not _is_number(priority) or not RULE_PRIORITY_MIN <= priority <= RULE_PRIORITY_MAX:
        errors.append(
            f"Priority must be a number between {RULE_PRIORITY_MIN:g} "
            f"and {RULE_PRIORITY_MAX:g}"
        )

    return errors


def validate_rule(rule: Mapping[str, Any]) -> List[str]:
    """Return every problem with a qualification rule; empty when valid."""
    errors = _validate_common(rule, QUALIFICATION_OPERATORS)

    actions = rule.get("actions")
    if not isinstance(actions, list) or not actions:
        errors.append("Rule must have at least one action")
        actions = actions if isinstance(actions, list) else []

    allowed = ", ".join(sorted(ACTION_TYPES))
    for index, action in enumerate(actions, start=1):
        if not isinstance(action, Mapping):
            errors.append(f"Action {index}: must be an object")
            continue
        if action.get("type") not in ACTION_TYPES:
            errors.append(f"Action {index}: type must be one of {allowed}")
        if not _non_empty_string(action.get("reasoning")):
            errors.append(f"Action {index}: reasoning is required and must be a string")

    return errors


def validate_tag_rule(rule: Mapping[str, Any]) -> List[str]:
    """Return every problem with a tag rule; empty when valid."""
    errors = _validate_common(rule, TAGGING_OPERATORS)

    if not _non_empty_string(rule.get("tag")):
        errors.append("Tag is required and must be a string")

    if rule.get("category") not in TAG_CATEGORIES:
        errors.append(
            f"Category must be one of {', '.join(sorted(TAG_CATEGORIES))}"
        )

    confidence = rule.get("confidence")
    if not _is_number(confidence) or not 0 <= confidence <= 1:
        errors.append("Confidence must be a number between 0 and 1")

    return errors
