import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from insight_validation.api import assignments, health, insights, reviewers
from insight_validation.config_api import get_api_config
from insight_validation.db.session import create_tables

config = get_api_config()
logging.basicConfig(level=config.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    create_tables()
    logger.info("validation_engine_started", extra={"cors_origins": list(config.cors_origins)})
    yield


app = FastAPI(title="Insight Validation & Consensus Engine", lifespan=lifespan)

if config.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", "Authorization"],
    )

for module in (health, insights, reviewers, assignments):
    app.include_router(module.router)
