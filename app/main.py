"""
Главный модуль FastAPI приложения каталога автозапчастей.

Содержит конфигурацию приложения, обработчики ошибок, middleware
и роутеры (REST API и серверные страницы витрины).
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1.routers import api_router
from app.core.config import settings
from app.core.errors import AppError, InternalError, NotFoundError, ValidationError
from app.db.database import engine
from app.services.validation import translate_errors
from app.web.pages import render_not_found, router as pages_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

# Создание экземпляра FastAPI приложения
app = FastAPI(
    title="Auto Parts Catalog API",
    description="API каталога автозапчастей: витрина, админ-панель, управление изображениями",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Настройка CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(errors=translate_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and not request.url.path.startswith(settings.API_PREFIX):
        if "text/html" in request.headers.get("accept", ""):
            return render_not_found(request)
    if exc.status_code == 404:
        message = NotFoundError.default_message
    else:
        message = exc.detail if isinstance(exc.detail, str) else InternalError.default_message
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=InternalError().to_dict())


@app.get(f"{settings.API_PREFIX}/health")
def health():
    """
    Health check endpoint для мониторинга состояния приложения.

    Returns:
        dict: Статус приложения и время сервера
    """
    return {
        "success": True,
        "message": "سرور در حال اجرا است",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# Подключение API роутеров
app.include_router(api_router, prefix=settings.API_PREFIX)

# Загруженные изображения и статика витрины
app.mount(
    settings.UPLOADS_URL_PREFIX,
    StaticFiles(directory=settings.STORAGE_PATH, check_dir=False),
    name="uploads",
)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Серверные страницы витрины и админ-панели
app.include_router(pages_router)


@app.on_event("startup")
async def startup_event():
    """
    Событие запуска приложения.

    Создает каталог для загрузок.
    """
    Path(settings.STORAGE_PATH).mkdir(parents=True, exist_ok=True)
    logger.info("Uploads directory: %s", Path(settings.STORAGE_PATH).resolve())


@app.on_event("shutdown")
async def shutdown_event():
    """
    Событие завершения приложения.

    Закрывает пул соединений с БД.
    """
    engine.dispose()
