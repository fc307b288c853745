from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stock_service.config_manager import StockServiceConfig

from .config import get_config
from .routes import api_router


def create_app(config: Optional[StockServiceConfig] = None) -> FastAPI:
    config = config or get_config()

    application = FastAPI(
        title="Stock Price API",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allow_origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=config.cors.allow_methods,
        allow_headers=config.cors.allow_headers,
        max_age=config.cors.max_age,
    )

    application.include_router(api_router)

    @application.get("/", tags=["Meta"])
    def index() -> dict[str, str]:
        return {
            "message": "Stock price API",
            "docs": "/api/docs",
            "example": "/stock/daily?symbol=AAPL",
        }

    return application


app = create_app()
