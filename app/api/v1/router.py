from fastapi import APIRouter

from app.api.v1.endpoints import leads, rules, tag_rules, health

router = APIRouter(prefix="/api/v1")

router.include_router(leads.router)
router.include_router(rules.router)
router.include_router(tag_rules.router)
router.include_router(health.router)
