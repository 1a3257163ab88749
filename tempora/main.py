from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
import uvicorn

from . import routers
from .config import get_settings
from .database import init_db, check_db_connection
from .utils.validation import ValidationHelpers

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Tempora API")
    init_db()
    yield
    logger.info("Stopping Tempora API")


# Initialize FastAPI app
app = FastAPI(
    title="Tempora API",
    description="Calendar, friends and scheduling assistant API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    max_age=settings.session_max_age,
    same_site="lax",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and query strings are 400s with readable messages"""
    message = ValidationHelpers.join_error_messages(exc.errors())
    logger.warning(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"detail": message}
    )


# Include routers
app.include_router(routers.auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(routers.schedules.router, prefix="/api/schedules", tags=["schedules"])
app.include_router(routers.events.router, prefix="/api/events", tags=["events"])
app.include_router(routers.calendar.router, prefix="/api/calendar", tags=["calendar"])
app.include_router(routers.friends.router, prefix="/api/friends", tags=["friends"])
app.include_router(routers.chatbot.router, prefix="/api/chatbot", tags=["chatbot"])
app.include_router(routers.admin.router, prefix="/api/admin", tags=["admin"])


@app.get("/")
async def root():
    return {"message": "Welcome to Tempora API", "status": "running"}


@app.get("/health")
async def health_check():
    database = check_db_connection()
    return {
        "status": "healthy" if all(database.values()) else "degraded",
        "service": "tempora-api",
        "version": "1.0.0",
        "database": database,
    }


if __name__ == "__main__":
    uvicorn.run("tempora.main:app", host="0.0.0.0", port=8000, reload=True)
