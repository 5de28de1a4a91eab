from app.core.constants import (
    ACTION_TYPES,
    DECISION_STAGES,
    QUALIFICATION_OPERATORS,
    TAG_CATEGORIES,
    TAGGING_OPERATORS,
    URGENCY_RESPONSE_CAP_MINUTES,
    URGENCY_TIMING,
)
from app.core.default_rules import DEFAULT_QUALIFICATION_RULES, DEFAULT_TAG_RULES
from app.schemas.common import ActionPriority, ActionType, Operator, TagCategory
from app.services.rule_validation import validate_rule, validate_tag_rule


class TestConstantsConsistency:
    """Verify that constants, enums, and schemas stay in sync."""

    def test_operators_match_enum(self):
        """Every Operator enum value must be understood by the tagging engine."""
        for member in Operator:
            assert member.value in TAGGING_OPERATORS

    def test_range_is_tagging_only(self):
        assert "range" not in QUALIFICATION_OPERATORS
        assert TAGGING_OPERATORS - QUALIFICATION_OPERATORS == {"range"}

    def test_action_types_match_enum(self):
        for member in ActionType:
            assert member.value in ACTION_TYPES

    def test_tag_categories_match_enum(self):
        for member in TagCategory:
            assert member.value in TAG_CATEGORIES

    def test_every_priority_has_timing(self):
        """URGENCY_TIMING must cover every ActionPriority."""
        for member in ActionPriority:
            assert member.value in URGENCY_TIMING

    def test_response_caps_shrink_with_urgency(self):
        caps = URGENCY_RESPONSE_CAP_MINUTES
        assert caps["urgent"] < caps["high"] < caps["medium"]
        assert "low" not in caps

    def test_decision_stages_in_funnel_order(self):
        assert DECISION_STAGES == ["awareness", "consideration", "evaluation", "decision"]


class TestDefaultRules:
    """The bundled rule sets must pass administrative validation."""

    def test_default_qualification_rules_are_valid(self):
        for rule in DEFAULT_QUALIFICATION_RULES:
            assert validate_rule(rule) == [], rule["id"]

    def test_default_tag_rules_are_valid(self):
        for rule in DEFAULT_TAG_RULES:
            assert validate_tag_rule(rule) == [], rule["id"]

    def test_default_rule_ids_are_unique(self):
        for rules in (DEFAULT_QUALIFICATION_RULES, DEFAULT_TAG_RULES):
            ids = [rule["id"] for rule in rules]
            assert len(ids) == len(set(ids))
