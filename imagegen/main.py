from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from imagegen.api.router import router
from imagegen.config import settings
from imagegen.core.exceptions import register_exception_handlers
from imagegen.core.logging import configure_logging
from imagegen.services import http_client

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("app_started", app_name=settings.app_name, blob_backend=settings.blob_backend)
    if not settings.api_key:
        logger.warning("api_key_missing")
    yield
    await http_client.close_client()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    configure_logging(settings)
    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    uvicorn.run("imagegen.main:app", host=settings.host, port=settings.port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
