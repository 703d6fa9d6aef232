from datetime import datetime, timezone

from fastapi import FastAPI

from tasky.api.todo_routes import router as todo_router
from tasky.config.settings import get_settings
from tasky.utils.cors import add_cors
from tasky.utils.logging_config import setup_logging


logger = setup_logging()
settings = get_settings()

app = FastAPI(
    title=f"{settings.app_name} V1 API",
    debug=settings.debug,
    description="Single-list to-do API backed by an in-memory store",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

add_cors(app, settings)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name} V1 (in-memory store)...")


app.include_router(todo_router, prefix="/api/v1/tasks", tags=["tasks"])


@app.get("/healthz", tags=["health"])
def health_check():
    return {"status": "ok", "timeUtc": datetime.now(timezone.utc).isoformat()}
