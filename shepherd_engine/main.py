"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from shepherd_engine.api import router as api_router
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.provider_registry import get_provider_registry

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fail fast: every task's primary provider needs a credential
    get_provider_registry().validate_routing()
    logger.info("Provider credentials validated for all task routes")
    yield


app = FastAPI(
    title="Shepherd Engine",
    description="AI orchestration for guided product ideation: clarity, research, MVP blueprint",
    version="0.1.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


# Include v1 API router
app.include_router(api_router, prefix="/v1", tags=["v1"])
