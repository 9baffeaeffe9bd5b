"""API v1 router combining all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import tlds

api_router = APIRouter()

api_router.include_router(tlds.router, prefix="/tlds", tags=["tlds"])
