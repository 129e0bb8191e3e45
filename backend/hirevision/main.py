import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from hirevision.config import settings
from hirevision.database import init_db
from hirevision.flows.base import FlowError
from hirevision.routers import (
    ai,
    analytics,
    applications,
    auth,
    conversations,
    interviews,
    jobs,
    organizations,
    posts,
    search,
    storage,
    users,
    voice,
)
from hirevision.services.auth_service import auth_service
from hirevision.services.llm_service import LLMNotConfigured
from hirevision.services.sso_service import SSOError, SSONotConfigured
from hirevision.services.storage_service import ObjectNotFound, StorageError
from hirevision.services.tts_service import TTSError, TTSNotConfigured
from hirevision.utils.filesystem import ensure_data_dirs

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("hirevision")


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_data_dirs()
    init_db()
    try:
        conn = sqlite3.connect(str(settings.db_path))
        result = conn.execute("PRAGMA integrity_check").fetchone()
        conn.close()
        if result and result[0] == "ok":
            logger.info("Database integrity check passed.")
        else:
            logger.error("DATABASE INTEGRITY CHECK FAILED: %s", result)
    except sqlite3.Error as exc:
        logger.error("Could not run startup integrity check: %s", exc)
    yield
    auth_service.clear()


app = FastAPI(
    title="HireVision",
    description="Recruiting platform API: jobs, applications, interviews, messaging, community and AI assistants",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path", "form"))
        message = f"Invalid request: {field + ': ' if field else ''}{first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return _error(400, message)


@app.exception_handler(LLMNotConfigured)
async def llm_not_configured_handler(request: Request, exc: LLMNotConfigured):
    return _error(503, str(exc))


@app.exception_handler(FlowError)
async def flow_error_handler(request: Request, exc: FlowError):
    return _error(502, str(exc))


@app.exception_handler(ObjectNotFound)
async def object_not_found_handler(request: Request, exc: ObjectNotFound):
    return _error(404, "File not found")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    return _error(502, str(exc))


@app.exception_handler(SSONotConfigured)
async def sso_not_configured_handler(request: Request, exc: SSONotConfigured):
    return _error(503, str(exc))


@app.exception_handler(SSOError)
async def sso_error_handler(request: Request, exc: SSOError):
    return _error(502, str(exc))


@app.exception_handler(TTSNotConfigured)
async def tts_not_configured_handler(request: Request, exc: TTSNotConfigured):
    return _error(503, str(exc))


@app.exception_handler(TTSError)
async def tts_error_handler(request: Request, exc: TTSError):
    return _error(502, str(exc))


app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(users.router, prefix=settings.api_prefix)
app.include_router(organizations.router, prefix=settings.api_prefix)
app.include_router(jobs.router, prefix=settings.api_prefix)
app.include_router(applications.router, prefix=settings.api_prefix)
app.include_router(applications.job_applications_router, prefix=settings.api_prefix)
app.include_router(interviews.router, prefix=settings.api_prefix)
app.include_router(interviews.application_interviews_router, prefix=settings.api_prefix)
app.include_router(conversations.router, prefix=settings.api_prefix)
app.include_router(posts.router, prefix=settings.api_prefix)
app.include_router(posts.connections_router, prefix=settings.api_prefix)
app.include_router(ai.router, prefix=settings.api_prefix)
app.include_router(ai.assistant_router, prefix=settings.api_prefix)
app.include_router(storage.router, prefix=settings.api_prefix)
app.include_router(voice.router, prefix=settings.api_prefix)
app.include_router(search.router, prefix=settings.api_prefix)
app.include_router(analytics.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}
