from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging

from app.api.v1.router import router as api_v1_router
from app.core.exceptions import (
    DuplicateRuleError,
    QualificationError,
    RuleNotFoundError,
    RuleStoreUnavailableError,
    RuleValidationError,
    TaggingError,
)
from app.core.config import settings as app_settings
from app.core.rate_limit import limiter
from app.core.database import AsyncSessionLocal, engine
from app.repositories.rule_definition_repository import RuleDefinitionRepository
from app.services.qualification_engine import QualificationEngine
from app.services.rule_bootstrap import build_rule_repositories, sync_rules_from_store
from app.services.tagging_engine import TaggingEngine

# Configure logging
logging.basicConfig(level=getattr(logging, app_settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load persisted rules on startup; dispose the DB pool on shutdown."""
    if app_settings.RULE_PERSISTENCE_ENABLED:
        try:
            async with AsyncSessionLocal() as session:
                await sync_rules_from_store(
                    RuleDefinitionRepository(session),
                    app.state.qualification_rules,
                    app.state.tag_rules,
                    seed_defaults=app_settings.SEED_DEFAULT_RULES,
                )
        except Exception:
            logger.warning(
                "Rule store unavailable at startup – serving default rules",
                exc_info=True,
            )
    yield
    await engine.dispose()


app = FastAPI(
    title="Lead Qualification Engine",
    description="Rule-based lead qualification, intelligent tagging and routing",
    version="0.1.0",
    lifespan=lifespan,
)

# Live rule sets and the engines reading them, shared by every request
qualification_rules, tag_rules = build_rule_repositories()
app.state.qualification_rules = qualification_rules
app.state.tag_rules = tag_rules
app.state.qualification_engine = QualificationEngine(qualification_rules)
app.state.tagging_engine = TaggingEngine(tag_rules)

# Attach rate limiter state so slowapi middleware can find it
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware – restricted to configured origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in app_settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(RuleNotFoundError)
async def rule_not_found_handler(request: Request, exc: RuleNotFoundError):
    logger.warning("Rule not found: %s", request.url.path)
    return JSONResponse(
        status_code=404,
        content={"detail": exc.detail, "type": "rule_not_found"},
    )


@app.exception_handler(DuplicateRuleError)
async def duplicate_rule_handler(request: Request, exc: DuplicateRuleError):
    logger.warning("Duplicate rule id: %s", exc.detail)
    return JSONResponse(
        status_code=409,
        content={"detail": exc.detail, "type": "duplicate_rule"},
    )


@app.exception_handler(RuleValidationError)
async def rule_validation_handler(request: Request, exc: RuleValidationError):
    logger.warning("Rule validation failed: %s", exc.errors)
    return JSONResponse(
        status_code=400,
        content={
            "detail": exc.detail,
            "errors": exc.errors,
            "type": "rule_validation_error",
        },
    )


@app.exception_handler(QualificationError)
async def qualification_error_handler(request: Request, exc: QualificationError):
    logger.error("Qualification failed: %s", exc.detail)
    return JSONResponse(
        status_code=500,
        content={
            "detail": exc.detail,
            "type": "qualification_error",
            "fallback_status": "requires_manual_review",
        },
    )


@app.exception_handler(TaggingError)
async def tagging_error_handler(request: Request, exc: TaggingError):
    logger.error("Tagging failed: %s", exc.detail)
    return JSONResponse(
        status_code=500,
        content={
            "detail": exc.detail,
            "type": "tagging_error",
            "fallback_status": "requires_manual_review",
        },
    )


@app.exception_handler(RuleStoreUnavailableError)
async def rule_store_unavailable_handler(
    request: Request, exc: RuleStoreUnavailableError
):
    logger.error("Rule store unavailable: %s", exc.detail)
    return JSONResponse(
        status_code=503,
        content={"detail": exc.detail, "type": "rule_store_unavailable"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Request validation error: %s", exc.errors())
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Request validation failed",
            "errors": jsonable_encoder(exc.errors()),
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected/unhandled exceptions.

    Returns a generic 500 response so that raw stack traces are never
    leaked to the client.
    """
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected internal error occurred. Please try again later.",
            "type": "internal_server_error",
        },
    )
