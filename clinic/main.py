from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from sqlalchemy.exc import OperationalError
import time
import logging
import redis

from .api.errors import register_exception_handlers
from .api.v1.auth import router as auth_router
from .api.v1.users import router as users_router
from .api.v1.appointments import router as appointments_router
from .api.v1.dashboard import router as dashboard_router
from .core.config import Settings, settings as default_settings
from .core.database import Database
from .core.exceptions import StorageUnavailableError
from .services.user_service import UserService

# Configure logging
logging.basicConfig(level=default_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def _bootstrap_admin(database: Database, settings: Settings):
    if not (settings.FIRST_ADMIN_EMAIL and settings.FIRST_ADMIN_PASSWORD):
        return
    db = database.session()
    try:
        admin = UserService(db).ensure_admin(
            settings.FIRST_ADMIN_NAME,
            settings.FIRST_ADMIN_EMAIL,
            settings.FIRST_ADMIN_PASSWORD,
        )
        logger.info(f"Bootstrap admin is user {admin.id}")
    finally:
        db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an explicit Settings instance."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Own the database and Redis clients for the life of the process."""
        logger.info(f"Starting {settings.APP_NAME}...")

        db_url = settings.get_database_url
        db_type = "PostgreSQL" if "postgresql" in db_url else "SQLite" if "sqlite" in db_url else "Unknown"
        logger.info(f"Using {db_type} database")

        database = Database(db_url)
        try:
            database.init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {str(e)}")
            raise

        app.state.database = database
        app.state.redis = redis.from_url(settings.REDIS_URL, decode_responses=True)
        _bootstrap_admin(database, settings)

        logger.info("Application startup complete")
        yield

        logger.info(f"Shutting down {settings.APP_NAME}...")
        app.state.redis.close()
        database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Clinic appointment scheduling: booking, visit records and role dashboards",
        openapi_url="/api/v1/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings

    # Middleware setup
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # TestClient requests carry a host the production allow-list rejects
    if not settings.TESTING:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["localhost", "127.0.0.1", "*.localhost"]
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.time()
        response = await call_next(request)
        elapsed = time.time() - started
        response.headers["X-Process-Time"] = str(elapsed)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.4f}s")
        return response

    register_exception_handlers(app)

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(appointments_router, prefix="/api/v1")
    app.include_router(dashboard_router, prefix="/api/v1")

    @app.get("/health")
    def health_check(request: Request):
        """Liveness plus a database round trip."""
        try:
            request.app.state.database.ping()
        except OperationalError as e:
            logger.error(f"Health check failed: {str(e)}")
            raise StorageUnavailableError()
        return {
            "status": "healthy",
            "database": "connected",
            "timestamp": time.time(),
            "version": settings.VERSION
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinic.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
        log_level="info"
    )
