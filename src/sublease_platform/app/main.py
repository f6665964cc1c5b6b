"""FastAPI application entry point for the campus sublease API."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sublease_platform.app.config import Settings, get_settings
from sublease_platform.app.routes.auth import router as auth_router
from sublease_platform.app.routes.conversations import messages_router
from sublease_platform.app.routes.conversations import router as conversations_router
from sublease_platform.app.routes.favorites import router as favorites_router
from sublease_platform.app.routes.listings import my_listings_router
from sublease_platform.app.routes.listings import router as listings_router
from sublease_platform.domain.errors import SubleaseError
from sublease_platform.infra.database import build_engine, build_session_factory, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: build the engine from ``app.state.settings``, dispose on shutdown."""
    settings = app.state.settings
    engine = build_engine(settings.database_url)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    await init_db(engine)
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    yield
    await engine.dispose()


async def sublease_error_handler(request: Request, exc: SubleaseError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
        headers=headers,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    route = request.scope.get("route")
    operation = getattr(route, "name", request.url.path)
    logger.exception("Unhandled error in %s %s", request.method, operation)
    return JSONResponse(status_code=500, content={"error": "internal_error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Campus Sublease API",
        lifespan=lifespan,
        debug=settings.debug,
    )

    # CORS middleware: allow all origins in debug mode
    cors_origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=("*" not in cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes resolve settings through get_settings; pin them to this instance
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_exception_handler(SubleaseError, sublease_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router)
    app.include_router(listings_router)
    app.include_router(my_listings_router)
    app.include_router(favorites_router)
    app.include_router(conversations_router)
    app.include_router(messages_router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Return service health status."""
        return {"status": "ok", "service": "sublease-platform"}

    return app


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = create_app(settings)


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "sublease_platform.app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
