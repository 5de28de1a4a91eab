from fastapi import APIRouter, Depends

from app.core.cache import CacheService
from app.services.qualification_engine import QualificationEngine
from app.services.tagging_engine import TaggingEngine
from app.api.deps import (
    get_cache_service,
    get_qualification_engine,
    get_tagging_engine,
)

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    qualification_engine: QualificationEngine = Depends(get_qualification_engine),
    tagging_engine: TaggingEngine = Depends(get_tagging_engine),
    cache: CacheService = Depends(get_cache_service),
):
    """Liveness plus the size of the live rule sets and Redis reachability."""
    return {
        "status": "healthy",
        "qualification_rules": len(qualification_engine.get_all_rules()),
        "tag_rules": len(tagging_engine.get_all_tag_rules()),
        "redis": await cache.ping(),
    }
