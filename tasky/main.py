from datetime import datetime, timezone

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tasky.api.auth_routes import router as auth_router
from tasky.api.routes import router as projects_router, tasks_router
from tasky.config.settings import get_settings
from tasky.storage.database import engine, init_db, provider_name
from tasky.utils.cors import add_cors
from tasky.utils.logging_config import setup_logging


# Setup logging
logger = setup_logging()
settings = get_settings()

app = FastAPI(
    title=f"{settings.app_name} V2 API",
    debug=settings.debug,
    description="Accounts, projects, tasks and a working-day task scheduler",
    version="2.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
add_cors(app, settings)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name} V2...")
    init_db()
    logger.info(f"Database provider {provider_name()} ready")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.app_name} V2...")

app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(projects_router, prefix="/api/v1/projects", tags=["projects"])
app.include_router(tasks_router, prefix="/api/v1/tasks", tags=["tasks"])


@app.get("/healthz", tags=["health"])
def health_check():
    """Health check endpoint for monitoring and load balancers."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = True
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        database = False

    return {
        "status": "ok",
        "timeUtc": datetime.now(timezone.utc).isoformat(),
        "provider": provider_name(),
        "database": database,
        "allowedOrigins": settings.cors_allowed_origins,
    }
