"""Tests for seeding the rule store with the bundled defaults."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.default_rules import DEFAULT_QUALIFICATION_RULES, DEFAULT_TAG_RULES
from app.repositories.rule_definition_repository import (
    QUALIFICATION_KIND,
    TAG_KIND,
    RuleDefinitionRepository,
)


def _session(stored_count: int) -> MagicMock:
    """An ``AsyncSession`` stand-in whose count query reports *stored_count*."""
    count_result = MagicMock()
    count_result.scalar.return_value = stored_count
    db = MagicMock()
    db.execute = AsyncMock(return_value=count_result)
    db.flush = AsyncMock()
    return db


def _added_rows(db):
    return [call.args[0] for call in db.add.call_args_list]


class TestSeedIfEmpty:
    @pytest.mark.asyncio
    async def test_rows_keep_bundled_order(self):
        db = _session(0)

        seeded = await RuleDefinitionRepository(db).seed_if_empty(
            QUALIFICATION_KIND, DEFAULT_QUALIFICATION_RULES
        )

        assert seeded is True
        rows = _added_rows(db)
        assert [row.rule_id for row in rows] == [d["id"] for d in DEFAULT_QUALIFICATION_RULES]
        stamps = [row.created_at for row in rows]
        # Strictly increasing, so ordering by created_at reproduces the list
        assert all(earlier < later for earlier, later in zip(stamps, stamps[1:]))
        db.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_definitions_carry_their_stamps(self):
        db = _session(0)

        await RuleDefinitionRepository(db).seed_if_empty(TAG_KIND, DEFAULT_TAG_RULES)

        for row in _added_rows(db):
            assert row.kind == TAG_KIND
            assert datetime.fromisoformat(row.definition["created"]) == row.created_at
            assert row.definition["updated"] == row.definition["created"]
        assert all("created" not in definition for definition in DEFAULT_TAG_RULES)

    @pytest.mark.asyncio
    async def test_existing_rules_left_alone(self):
        db = _session(3)

        seeded = await RuleDefinitionRepository(db).seed_if_empty(
            QUALIFICATION_KIND, DEFAULT_QUALIFICATION_RULES
        )

        assert seeded is False
        db.add.assert_not_called()
        db.flush.assert_not_awaited()
