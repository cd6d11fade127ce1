import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from shotboard.core.config import settings
from shotboard.core.logging import configure_logging
from shotboard.db import Base, engine
from shotboard import models  # noqa: F401  registers tables on Base
from shotboard.api.dependencies import get_relay
from shotboard.api.routes import auth, health, projects, realtime

configure_logging()
logger = logging.getLogger(__name__)

# Create DB tables on startup; schema migrations are managed outside this service
Base.metadata.create_all(bind=engine)


async def refresh_presence(interval: float) -> None:
    registry = get_relay().registry
    while True:
        await asyncio.sleep(interval)
        try:
            await run_in_threadpool(registry.refresh)
        except Exception as e:
            logger.warning("Presence refresh failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if settings.PRESENCE_BACKEND == "redis":
        task = asyncio.create_task(refresh_presence(settings.PRESENCE_TTL_SECONDS / 3))
    yield
    if task:
        task.cancel()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Storage error"})


app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(projects.router, prefix=settings.API_PREFIX)
app.include_router(realtime.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=3000)
