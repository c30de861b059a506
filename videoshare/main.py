import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from videoshare.config import Settings, get_settings
from videoshare.database import ConnectionCache
from videoshare.errors import register_exception_handlers
from videoshare.routers import auth, videos

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Raises ConfigurationError when no database URL is set."""
    settings = settings or get_settings()
    database_url = settings.require_database_url()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    connection_cache = ConnectionCache(database_url, max_pool_size=settings.db_max_pool_size)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            connection_cache.dispose()

    app = FastAPI(title="Video Share API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.connection_cache = connection_cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(auth.router)
    app.include_router(videos.router)

    @app.get("/")
    def root():
        return {"message": "Video Share API", "docs": "/docs"}

    return app


app = create_app()
