import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from interviewai.api.routes import auth, functions, health, interviews, profile, voice_ws
from interviewai.core import config
from interviewai.core.errors import InterviewError
from interviewai.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(config.LOG_LEVEL)
    if config.RUN_MIGRATIONS:
        from interviewai.db.migrate import run_migrations
        run_migrations()
    else:
        from interviewai.db.init_db import init_db
        init_db()
    logger.info("InterviewAI API started")
    yield


# ============================================
# ✅ FASTAPI APP INIT
# ============================================

app = FastAPI(title="InterviewAI", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(InterviewError)
async def interview_error_handler(request: Request, exc: InterviewError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "retryable": exc.retryable},
    )


# ============================================
# ✅ REGISTER ALL ROUTERS
# ============================================

app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(interviews.router)
app.include_router(functions.router)
app.include_router(voice_ws.router)
app.include_router(health.router)


@app.get("/")
def root():
    return {"status": "InterviewAI API running"}
