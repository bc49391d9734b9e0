"""API v1 router - includes all v1 endpoints."""

from fastapi import APIRouter

from learnhub.api.v1.endpoints import dashboard, gamification, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
