"""Central API router aggregating all domain routers."""

from fastapi import APIRouter

from rolegate.health.router import router as health_router
from rolegate.roles.router import router as roles_router
from rolegate.user.router import router as user_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(roles_router)
api_router.include_router(user_router)
