"""API router for v1 endpoints."""

from fastapi import APIRouter

from shepherd_engine.api import engine

router = APIRouter()

# Clarity -> research -> blueprint generation, orchestrated research, provider health
router.include_router(engine.router, tags=["engine"])
