"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from valuation.api.deps import engine
from valuation.api.routes import evaluate, proximity
from valuation.config import require_database_url, settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    require_database_url()
    logger.info(
        "Providers: market data %s, landmark search %s",
        "enabled" if settings.zoneval_api_key and settings.zoneval_api_secret else "disabled",
        "enabled" if settings.google_maps_api_key else "disabled",
    )
    yield
    await engine.dispose()


app = FastAPI(
    title="Imovel Valuation",
    description="Comparable-based property valuation with market and location refinement",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(evaluate.router)
app.include_router(proximity.router)


@app.get("/health")
async def health():
    return {"status": "ok"}
