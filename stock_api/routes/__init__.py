from fastapi import APIRouter

from . import admin, meta, stock

api_router = APIRouter()
api_router.include_router(meta.router)
api_router.include_router(stock.router)
api_router.include_router(admin.router)

__all__ = ["api_router"]
