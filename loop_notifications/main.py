from contextlib import asynccontextmanager

from fastapi import FastAPI

from loop_notifications.api.routes.cron import router as cron_router
from loop_notifications.api.routes.health import router as health_router
from loop_notifications.core.logging import setup_logging
from loop_notifications.core.settings import get_settings


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


settings = get_settings()
app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
app.include_router(health_router)
app.include_router(cron_router)
