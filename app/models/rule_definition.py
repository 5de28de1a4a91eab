from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.models.base import Base


class RuleDefinition(Base):
    """Persisted form of a qualification or tag rule.

    ``kind`` is ``"qualification"`` or ``"tag"``; ``definition`` holds the
    rule as plain JSON, in the same shape the admin API accepts.
    The in-memory rule repositories are loaded from this table at startup
    and written through on every administrative change.
    """

    __tablename__ = "rule_definitions"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('qualification', 'tag')", name="ck_rule_definitions_kind"
        ),
    )

    kind = Column(String(20), primary_key=True)
    rule_id = Column(String(100), primary_key=True)
    definition = Column(JSONB, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
