from fastapi import APIRouter

from kasir.app.api.v1.endpoints import assets, auth, cashier, dashboard

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(cashier.router, prefix="/cashier", tags=["cashier"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(assets.router, prefix="/assets", tags=["assets"])
