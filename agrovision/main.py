import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agrovision.areas.router import router as areas_router
from agrovision.auth.router import router as auth_router
from agrovision.clients.router import router as clients_router
from agrovision.core.config import DEFAULT_SECRET_KEY, Settings, get_settings
from agrovision.core.errors import AppError, InternalError
from agrovision.crops.router import router as crops_router
from agrovision.db.init_db import seed_initial_data
from agrovision.db.session import Database
from agrovision.losses.router import router as losses_router
from agrovision.pests.router import router as pests_router
from agrovision.properties.router import router as properties_router
from agrovision.users.router import router as users_router

logger = logging.getLogger("agrovision")


def configure_logging(level: str) -> None:
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database = Database(settings.DATABASE_URL)
    database.connect()
    database.create_schema()
    seed_initial_data(database, settings)
    app.state.database = database

    if settings.is_production:
        if settings.SECRET_KEY == DEFAULT_SECRET_KEY:
            logger.warning("SECRET_KEY esta usando valor padrao em producao.")
        if database.is_sqlite:
            logger.warning("DATABASE_URL aponta para SQLite em producao.")
    logger.info("%s started env=%s", settings.APP_NAME, settings.ENV)
    try:
        yield
    finally:
        database.disconnect()
        logger.info("%s stopped", settings.APP_NAME)


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "campo": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "mensagem": error.get("msg"),
        }
        for error in exc.errors()
    ]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    application = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="AgroVision - Gestao agricola multi-cliente",
        lifespan=lifespan,
    )
    application.state.settings = settings

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("request failed path=%s error=%s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Dados invalidos",
                "details": _validation_details(exc),
            },
        )

    @application.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=InternalError().to_dict())

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.2f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    for router in (
        auth_router,
        users_router,
        clients_router,
        properties_router,
        areas_router,
        crops_router,
        pests_router,
        losses_router,
    ):
        application.include_router(router, prefix="/api")

    @application.get("/api/health")
    def health():
        return {"status": "ok"}

    return application


app = create_app()
