"""
ProjectFlow application entry point
"""
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from projectflow.config import settings
from projectflow.api.v1.router import api_router
from projectflow.core.database import init_db, close_db, async_session_factory
from projectflow.core.exceptions import APIException
from projectflow.core.logging import setup_logging, get_logger, log_request_end

setup_logging()
logger = get_logger(__name__)


def envelope(data: Any = None, error: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Every JSON body outside the resource routes uses this shape"""
    body: Dict[str, Any] = {"success": error is None, "timestamp": time.time()}
    if error is None:
        body["data"] = data
    else:
        body["error"] = error
    return body


def error_response(status_code: int, code: str, message: str,
                   details: Optional[Dict[str, Any]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(error={"code": code, "message": message, "details": details})
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting ProjectFlow API", extra={"environment": settings.environment})
    await init_db()

    yield

    await close_db()
    logger.info("ProjectFlow API stopped")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Project planning service: guided project setup, AI-assisted features and a shared task board",
    docs_url="/docs" if settings.is_development else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Mock-User-Id"],
)


@app.middleware("http")
async def time_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started

    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    log_request_end(logger, request.method, request.url.path, response.status_code, elapsed)
    return response


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    return error_response(exc.status_code, exc.error_code, exc.message, exc.details)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything that escaped the service layer: log with traceback, hide details outside debug"""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"request_path": request.url.path, "request_method": request.method}
    )
    details = {"exception_type": type(exc).__name__, "exception_message": str(exc)} if settings.debug else None
    return error_response(500, "SYS_001", "Internal server error", details)


@app.get("/")
async def root():
    return envelope({"service": settings.app_name, "version": settings.app_version})


@app.get("/health")
async def health_check():
    """Liveness plus a round trip to the database"""
    database = {"status": "healthy", "error": None}
    try:
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning(f"Health check could not reach the database: {e}")
        database = {"status": "unhealthy", "error": str(e)}

    return envelope({
        "status": "healthy" if database["status"] == "healthy" else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "database": database,
    })


app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("projectflow.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
