from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from core.config import Settings, load_settings
from core.db import Database
from core.logger import configure_logging

# Routes
from api.routes import billing_router, menu_router, order_router, request_validation_response

logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        database = Database.from_settings(settings)
        database.create_all()
        app.state.database = database
        logger.info("Connection pool initialized", app=settings.app_name)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, request_validation_response)
    app.include_router(menu_router)
    app.include_router(order_router)
    app.include_router(billing_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": settings.app_name}

    return app


if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
