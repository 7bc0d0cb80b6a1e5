from fastapi import APIRouter

from app.branchstock.core.config import settings
from app.branchstock.routers.auth import router as auth_router
from app.branchstock.routers.branches import router as branches_router
from app.branchstock.routers.health import router as health_router
from app.branchstock.routers.inventory import router as inventory_router
from app.branchstock.routers.metrics import router as metrics_router
from app.branchstock.routers.stock_movements import router as stock_movements_router
from app.branchstock.routers.transfers import router as transfers_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router, prefix="/api/auth", tags=["auth"])
api_router.include_router(branches_router, tags=["branches"])
api_router.include_router(inventory_router, tags=["inventory"])
api_router.include_router(stock_movements_router, tags=["stock-movements"])
api_router.include_router(transfers_router, tags=["transfers"])
if settings.METRICS_ENABLED:
    api_router.include_router(metrics_router, tags=["ops"])
