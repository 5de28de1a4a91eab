"""Tests for field extraction, numeric coercion and operator semantics."""

import pytest

from app.core.constants import QUALIFICATION_OPERATORS
from app.services.conditions import (
    MISSING,
    evaluate_condition,
    extract_field,
    format_value,
    strict_equals,
    try_coerce_number,
)


class TestExtractField:
    """Dot-path lookups over nested lead records."""

    def test_nested_path_resolves(self):
        record = {"features": {"location": {"state": "CA"}}}
        assert extract_field(record, "features.location.state") == "CA"

    def test_missing_segment_returns_sentinel(self):
        record = {"features": {}}
        assert extract_field(record, "features.location.state") is MISSING

    def test_non_mapping_intermediate_returns_sentinel(self):
        record = {"features": {"location": "CA"}}
        assert extract_field(record, "features.location.state") is MISSING

    def test_explicit_none_is_returned_as_none(self):
        assert extract_field({"aiScore": None}, "aiScore") is None


class TestTryCoerceNumber:
    """Numeric coercion used by comparison operators."""

    @pytest.mark.parametrize(
        "value, expected",
        [(5, 5.0), (2.5, 2.5), ("42", 42.0), (" 7.5 ", 7.5), (True, 1.0), (False, 0.0)],
    )
    def test_coercible_values(self, value, expected):
        assert try_coerce_number(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", None, MISSING, float("nan"), [1], {}])
    def test_non_numeric_values(self, value):
        assert try_coerce_number(value) is None


class TestFormatValue:
    def test_list_joined_with_commas(self):
        assert format_value(["a", "b"]) == "a,b"

    def test_list_bracketed_for_tag_reasoning(self):
        assert format_value(["CA", "NY"], bracket_lists=True) == "[CA, NY]"

    def test_integral_float_prints_as_int(self):
        assert format_value(750.0) == "750"
        assert format_value(0.7) == "0.7"

    def test_bools_print_lowercase(self):
        assert format_value(True) == "true"


class TestStrictEquals:
    def test_bool_never_equals_number(self):
        assert strict_equals(True, 1) is False

    def test_string_never_equals_number(self):
        assert strict_equals("1", 1) is False

    def test_case_insensitive_strings(self):
        assert strict_equals("Mobile", "mobile") is False
        assert strict_equals("Mobile", "mobile", case_insensitive=True) is True


class TestEvaluateCondition:
    """Every operator, including the missing-field rules."""

    def test_comparisons_are_inclusive_where_named(self):
        assert evaluate_condition(750, "gte", 750) is True
        assert evaluate_condition(749, "gte", 750) is False
        assert evaluate_condition(750, "gt", 750) is False
        assert evaluate_condition(29, "lt", 30) is True
        assert evaluate_condition(30, "lte", 30) is True

    def test_comparison_coerces_numeric_strings(self):
        assert evaluate_condition("800", "gt", 750) is True

    def test_comparison_with_non_numeric_operand_fails(self):
        assert evaluate_condition(800, "gt", "high") is False
        assert evaluate_condition("n/a", "gt", 1) is False

    def test_missing_field_fails_every_positive_operator(self):
        for operator in ("gt", "gte", "lt", "lte", "eq", "in", "contains", "range"):
            assert evaluate_condition(MISSING, operator, 1) is False

    def test_not_in_holds_for_missing_field(self):
        assert evaluate_condition(MISSING, "not_in", ["a"]) is True
        assert evaluate_condition(None, "not_in", ["a"]) is True

    def test_in_and_not_in(self):
        assert evaluate_condition("referral", "in", ["referral", "direct"]) is True
        assert evaluate_condition("paid", "in", ["referral", "direct"]) is False
        assert evaluate_condition("paid", "not_in", ["referral"]) is True
        assert evaluate_condition("referral", "not_in", ["referral"]) is False

    def test_in_requires_a_list_operand(self):
        assert evaluate_condition("a", "in", "a") is False
        assert evaluate_condition("a", "not_in", "a") is True

    def test_contains_is_case_insensitive_substring(self):
        assert evaluate_condition("Google_Paid_Search", "contains", "paid") is True
        assert evaluate_condition("organic", "contains", "paid") is False

    def test_range_is_inclusive(self):
        assert evaluate_condition(60, "range", [60, 300]) is True
        assert evaluate_condition(301, "range", [60, 300]) is False
        assert evaluate_condition(100, "range", [60]) is False

    def test_range_not_available_to_qualification(self):
        assert (
            evaluate_condition(100, "range", [60, 300], operators=QUALIFICATION_OPERATORS)
            is False
        )

    def test_unknown_operator_never_matches(self):
        assert evaluate_condition(5, "between", [1, 10]) is False

    def test_eq_case_sensitivity_is_configurable(self):
        assert evaluate_condition("Mobile", "eq", "mobile") is False
        assert evaluate_condition("Mobile", "eq", "mobile", case_insensitive_eq=True) is True
