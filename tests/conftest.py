from typing import TYPE_CHECKING, Any, AsyncGenerator, Dict
from unittest.mock import AsyncMock

if TYPE_CHECKING:
    from app.core.cache import CacheService

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.rate_limit import limiter
from app.dependencies import get_redis_client, get_rule_store
from app.main import app
from app.repositories.rule_repository import (
    QualificationRuleRepository,
    TagRuleRepository,
)
from app.services.qualification_engine import QualificationEngine
from app.services.rule_bootstrap import load_default_rules
from app.services.tagging_engine import TaggingEngine


@pytest.fixture(autouse=True)
def _isolated_app_state():
    """Default rules, no database, no Redis and fresh rate limits per test."""
    limiter.reset()
    load_default_rules(app.state.qualification_rules, app.state.tag_rules)
    app.dependency_overrides[get_rule_store] = lambda: None
    app.dependency_overrides[get_redis_client] = lambda: None
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock()
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> "CacheService":
    """Return a ``CacheService`` backed by the mock Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=mock_redis)


@pytest.fixture
def qualification_engine() -> QualificationEngine:
    """An engine over an empty, test-owned rule set."""
    return QualificationEngine(QualificationRuleRepository())


@pytest.fixture
def tagging_engine() -> TaggingEngine:
    """A tagging engine over an empty, test-owned tag rule set."""
    return TaggingEngine(TagRuleRepository())


def make_rule(**overrides: Any) -> Dict[str, Any]:
    """A valid qualification rule definition; override any field."""
    rule: Dict[str, Any] = {
        "id": "test-rule",
        "name": "Test Rule",
        "priority": 50,
        "conditions": [
            {"field": "features.creditScore", "operator": "gte", "value": 700, "weight": 20}
        ],
        "actions": [{"type": "qualify", "value": True, "reasoning": "Good credit"}],
    }
    rule.update(overrides)
    return rule


def make_tag_rule(**overrides: Any) -> Dict[str, Any]:
    """A valid tag rule definition; override any field."""
    rule: Dict[str, Any] = {
        "id": "test-tag-rule",
        "name": "Test Tag Rule",
        "tag": "test_tag",
        "priority": 50,
        "conditions": [
            {"field": "features.income", "operator": "gte", "value": 50000, "weight": 10}
        ],
        "confidence": 0.9,
        "category": "quality",
    }
    rule.update(overrides)
    return rule
