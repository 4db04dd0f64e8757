from fastapi import APIRouter

from billing_api.api.v1 import auth, health, tariff_links

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(tariff_links.router, tags=["Tariffs"])
api_router.include_router(health.router, tags=["Health"])
