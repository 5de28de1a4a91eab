"""Condition evaluation over a lead's nested feature record.

Everything here is pure and never raises on malformed input: a bad
operator, a non-numeric operand or a missing field simply fails the
condition.
"""

import math
from typing import Any, Collection, Mapping, Optional

from app.core.constants import TAGGING_OPERATORS


class _Missing:
    """Sentinel for a field path that does not resolve."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def extract_field(record: Any, path: str) -> Any:
    """Walk *record* along a dot-separated *path*.

    Returns ``MISSING`` as soon as a segment cannot be resolved, including
    when an intermediate value is not a mapping.
    """
    value = record
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return MISSING
        value = value[part]
    return value


def is_absent(value: Any) -> bool:
    return value is MISSING or value is None


def try_coerce_number(value: Any) -> Optional[float]:
    """Coerce *value* to a float, or return ``None`` if it is not numeric.

    Booleans count as 1/0, numeric strings are parsed, NaN is rejected.
    """
    if is_absent(value):
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def format_value(value: Any, bracket_lists: bool = False) -> str:
    """Render an operand the way it appears in reasoning strings."""
    if isinstance(value, (list, tuple)):
        inner = ", " if bracket_lists else ","
        rendered = inner.join(format_value(v) for v in value)
        return f"[{rendered}]" if bracket_lists else rendered
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def strict_equals(left: Any, right: Any, case_insensitive: bool = False) -> bool:
    """Type-strict equality: ``True`` never equals ``1`` and ``"1"`` never equals ``1``."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        if case_insensitive:
            return left.casefold() == right.casefold()
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _compare(field_value: Any, expected: Any, op: str) -> bool:
    left = try_coerce_number(field_value)
    right = try_coerce_number(expected)
    if left is None or right is None:
        return False
    if op == "gt":
        return left > right
    if op == "gte":
        return left >= right
    if op == "lt":
        return left < right
    return left <= right


def evaluate_condition(
    field_value: Any,
    operator: str,
    expected: Any,
    operators: Collection[str] = TAGGING_OPERATORS,
    case_insensitive_eq: bool = False,
) -> bool:
    """Evaluate one condition.

    A missing field fails every operator except ``not_in``, which holds
    because the value is trivially absent from the list. Operators not in
    *operators* never match.
    """
    if operator not in operators:
        return False

    if operator == "not_in":
        if not isinstance(expected, (list, tuple)):
            return True
        if is_absent(field_value):
            return True
        return not any(
            strict_equals(field_value, item, case_insensitive_eq) for item in expected
        )

    if is_absent(field_value):
        return False

    if operator in ("gt", "gte", "lt", "lte"):
        return _compare(field_value, expected, operator)

    if operator == "eq":
        return strict_equals(field_value, expected, case_insensitive_eq)

    if operator == "in":
        if not isinstance(expected, (list, tuple)):
            return False
        return any(
            strict_equals(field_value, item, case_insensitive_eq) for item in expected
        )

    if operator == "contains":
        return format_value(expected).lower() in format_value(field_value).lower()

    if operator == "range":
        if not isinstance(expected, (list, tuple)) or len(expected) != 2:
            return False
        number = try_coerce_number(field_value)
        low = try_coerce_number(expected[0])
        high = try_coerce_number(expected[1])
        if number is None or low is None or high is None:
            return False
        return low <= number <= high

    return False
