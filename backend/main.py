import importlib
import logging
import pkgutil
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import devhub.apis
from devhub import __version__
from devhub.deps import get_settings
from devhub.libs.database import ensure_schema

logger = logging.getLogger("devhub")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    await ensure_schema(settings.database_url)
    if not settings.ai_available:
        logger.warning("OPENAI_API_KEY missing: chat and repository import are disabled until configured")
    yield


def create_app(bootstrap_schema: bool = True) -> FastAPI:
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="DevHub Portfolio API",
        version=__version__,
        lifespan=lifespan if bootstrap_schema else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "service": "devhub-portfolio"}

    # Include every router under devhub/apis/
    for module_info in pkgutil.iter_modules(devhub.apis.__path__):
        module = importlib.import_module(f"devhub.apis.{module_info.name}")
        if hasattr(module, "router"):
            app.include_router(module.router)
            logger.debug("Loaded API: %s", module_info.name)

    return app


app = create_app()
