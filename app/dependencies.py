import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from redis.asyncio import Redis

from app.core.cache import CacheService
from app.core.config import settings
from app.core.database import get_db
from app.repositories.rule_definition_repository import RuleDefinitionRepository
from app.services.lead_decision_service import LeadDecisionService
from app.services.qualification_engine import QualificationEngine
from app.services.routing_planner import RoutingPlanner
from app.services.rule_admin_service import RuleAdminService
from app.services.tagging_engine import TaggingEngine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> AsyncGenerator[Optional[Redis], None]:
    """Yield an async Redis client, or ``None`` when Redis is unreachable."""
    client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except Exception:
        logger.warning("Redis unavailable – round-robin falls back to in-process")
        await client.aclose()
        yield None
        return
    try:
        yield client
    finally:
        await client.aclose()


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
) -> CacheService:
    """Build a :class:`CacheService` backed by the shared Redis client."""
    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Rule store factory
# ---------------------------------------------------------------------------


async def get_rule_store(
    db: AsyncSession = Depends(get_db),
) -> Optional[RuleDefinitionRepository]:
    """Database-backed rule store, or ``None`` when persistence is off."""
    if not settings.RULE_PERSISTENCE_ENABLED:
        return None
    return RuleDefinitionRepository(db)


# ---------------------------------------------------------------------------
# Engine and service factories
# ---------------------------------------------------------------------------


def get_qualification_engine(request: Request) -> QualificationEngine:
    return request.app.state.qualification_engine


def get_tagging_engine(request: Request) -> TaggingEngine:
    return request.app.state.tagging_engine


async def get_routing_planner(
    cache: CacheService = Depends(get_cache_service),
) -> RoutingPlanner:
    return RoutingPlanner(cache=cache)


async def get_lead_decision_service(
    qualification_engine: QualificationEngine = Depends(get_qualification_engine),
    tagging_engine: TaggingEngine = Depends(get_tagging_engine),
    routing_planner: RoutingPlanner = Depends(get_routing_planner),
) -> LeadDecisionService:
    """Build a :class:`LeadDecisionService` over the shared engines."""
    return LeadDecisionService(
        qualification_engine=qualification_engine,
        tagging_engine=tagging_engine,
        routing_planner=routing_planner,
    )


async def get_rule_admin_service(
    qualification_engine: QualificationEngine = Depends(get_qualification_engine),
    tagging_engine: TaggingEngine = Depends(get_tagging_engine),
    store: Optional[RuleDefinitionRepository] = Depends(get_rule_store),
) -> RuleAdminService:
    """Build a :class:`RuleAdminService` writing through to the rule store."""
    return RuleAdminService(
        qualification_engine=qualification_engine,
        tagging_engine=tagging_engine,
        store=store,
    )
