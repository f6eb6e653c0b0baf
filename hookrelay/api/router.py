"""
API router — aggregates all route modules.
"""
from fastapi import APIRouter
from hookrelay.api.hooks import router as hooks_router
from hookrelay.api.endpoints import router as endpoints_router
from hookrelay.api.messages import router as messages_router
from hookrelay.api.health import router as health_router

api_router = APIRouter()
api_router.include_router(hooks_router)
api_router.include_router(endpoints_router)
api_router.include_router(messages_router)
api_router.include_router(health_router)
