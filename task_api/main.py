# task_api/main.py
from contextlib import asynccontextmanager
import logging

from dotenv import load_dotenv

# .env 를 먼저 로딩해야 db/session.py 의 DATABASE_URL 조립에 반영됨
load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from task_api.core.config import Settings, get_settings  # noqa: E402
from task_api.core.error_handlers import register_error_handlers  # noqa: E402
from task_api.core.logging_config import setup_logging  # noqa: E402
from task_api.db.session import create_all_tables  # noqa: E402

# 모델 모듈 임포트(테이블 등록 보장용)
from task_api.db import base as _base  # noqa: F401,E402

from task_api.routers import health, task  # noqa: E402

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if settings.db_auto_create:
            logger.info("DB_AUTO_CREATE on: creating missing tables")
            create_all_tables()
        yield

    app = FastAPI(
        title="Task API",
        version=settings.app_version,
        lifespan=lifespan,
    )

    # before CORS so error responses still pass through it
    register_error_handlers(app, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(task.router)

    @app.get("/")
    def root():
        return {
            "service": "Task API",
            "version": settings.app_version,
            "endpoints": {
                "health": "GET /health",
                "tasks": {
                    "create": "POST /tasks",
                    "list": "GET /tasks",
                    "get": "GET /tasks/{id}",
                    "update": "PUT /tasks/{id}",
                    "delete": "DELETE /tasks/{id}",
                },
            },
        }

    return app


setup_logging(get_settings().log_level)
app = create_app()
