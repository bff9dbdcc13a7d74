from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk.api.router import api_router
from helpdesk.core.config import get_settings
from helpdesk.core.errors import register_exception_handlers
from helpdesk.core.events import register_event_logging
from helpdesk.core.logging_config import setup_logging

settings = get_settings()
logger = setup_logging(settings.log_level)
register_event_logging()


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    attachments_dir = get_settings().attachments_dir
    attachments_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Helpdesk API started (env=%s, attachments=%s)", settings.app_env, attachments_dir)
    yield
    logger.info("Helpdesk API stopped")


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    debug=settings.app_debug,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Helpdesk API is running"}
