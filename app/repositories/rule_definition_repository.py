import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert

from app.models.rule_definition import RuleDefinition
from app.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

QUALIFICATION_KIND = "qualification"
TAG_KIND = "tag"


class RuleDefinitionRepository(BaseRepository):
    """Encapsulates queries against the ``rule_definitions`` table."""

    async def list_definitions(self, kind: str) -> List[Dict[str, Any]]:
        """Return every stored definition of *kind*, oldest first."""
        result = await self._db.execute(
            select(RuleDefinition.definition)
            .where(RuleDefinition.kind == kind)
            .order_by(RuleDefinition.created_at, RuleDefinition.rule_id)
        )
        return [dict(row) for row in result.scalars().all()]

    async def upsert_definition(
        self, kind: str, rule_id: str, definition: Dict[str, Any]
    ) -> None:
        """Insert or overwrite one definition (keyed by kind + rule id)."""
        stmt = insert(RuleDefinition).values(
            kind=kind, rule_id=rule_id, definition=definition
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[RuleDefinition.kind, RuleDefinition.rule_id],
            set_={"definition": stmt.excluded.definition, "updated_at": func.now()},
        )
        await self._db.execute(stmt)

    async def delete_definition(self, kind: str, rule_id: str) -> bool:
        """Delete one definition; ``True`` if a row was removed."""
        result = await self._db.execute(
            delete(RuleDefinition).where(
                RuleDefinition.kind == kind, RuleDefinition.rule_id == rule_id
            )
        )
        return bool(result.rowcount)

    async def seed_if_empty(
        self, kind: str, defaults: Sequence[Dict[str, Any]]
    ) -> bool:
        """Insert *defaults* when no definition of *kind* exists yet.

        Returns ``True`` if anything was seeded.
        """
        count_result = await self._db.execute(
            select(func.count())
            .select_from(RuleDefinition)
            .where(RuleDefinition.kind == kind)
        )
        if count_result.scalar():
            return False  # rules already present

        logger.info("No %s rules stored, seeding defaults", kind)
        # One microsecond apart so reloading keeps the bundled order
        seeded_at = datetime.now(timezone.utc)
        for position, definition in enumerate(defaults):
            stamp = seeded_at + timedelta(microseconds=position)
            self._db.add(
                RuleDefinition(
                    kind=kind,
                    rule_id=definition["id"],
                    definition={
                        **definition,
                        "created": stamp.isoformat(),
                        "updated": stamp.isoformat(),
                    },
                    created_at=stamp,
                    updated_at=stamp,
                )
            )
        await self._db.flush()
        logger.info("Seeded %d default %s rules", len(defaults), kind)
        return True
