"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    # Engines
    get_qualification_engine,
    get_tagging_engine,
    # Service factories
    get_routing_planner,
    get_lead_decision_service,
    get_rule_admin_service,
    # Infrastructure
    get_cache_service,
    get_redis_client,
    get_rule_store,
)

__all__ = [
    "get_qualification_engine",
    "get_tagging_engine",
    "get_routing_planner",
    "get_lead_decision_service",
    "get_rule_admin_service",
    "get_cache_service",
    "get_redis_client",
    "get_rule_store",
]
