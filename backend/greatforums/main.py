"""
Great Forums Application.

FastAPI application serving a server-rendered discussion forum:
accounts, posts with categories, comments and likes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse, PlainTextResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from greatforums.api import router as pages_router
from greatforums.core.config import settings
from greatforums.core.database import async_session_maker, close_db, init_db
from greatforums.core.exceptions import ForumError
from greatforums.core.logging import setup_logging
from greatforums.modules.auth.service import AuthService
from greatforums.modules.forum.service import ForumService


async def seed_db() -> None:
    """Create default categories and drop expired sessions."""
    async with async_session_maker() as session:
        await ForumService(session).ensure_categories(settings.default_categories)
        await AuthService(session).purge_expired_sessions()
        await session.commit()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting Great Forums...")

    await init_db()
    await seed_db()
    logger.info("Database initialized")

    logger.info(f"{settings.app_name} started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Great Forums...")
    await close_db()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Great Forums

    ## Features

    - **Accounts**: Registration, login and cookie sessions
    - **Posts**: Posts tagged with categories
    - **Comments**: Discussion under each post
    - **Likes**: Likes and dislikes on posts and comments
    """,
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> PlainTextResponse:
    """Turn service errors into plain-text error responses."""
    logger.debug(f"{request.method} {request.url.path}: {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> PlainTextResponse:
    """Answer HTTP errors (401, 404, ...) in plain text."""
    return PlainTextResponse(
        str(exc.detail), status_code=exc.status_code, headers=exc.headers
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Log unexpected failures and answer 500."""
    logger.opt(exception=exc).error(f"{request.method} {request.url.path} failed")
    return PlainTextResponse("Internal Server Error", status_code=500)


app.include_router(pages_router)


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


def run() -> None:
    """Run development server."""
    uvicorn.run(
        "greatforums.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
