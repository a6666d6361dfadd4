"""
layerlint API Server.

    uvicorn layerlint.server.main:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from layerlint.server.deps import get_engine
from layerlint.server.routes import analyze, layers, runs


VERSION = "0.1.0"
DEFAULT_ORIGINS = "http://localhost:3000,http://localhost:5173"

logger = logging.getLogger(__name__)


def route_table(app: FastAPI) -> list[tuple[str, str, str]]:
    """(methods, path, endpoint name) for every API route, sorted by path."""
    rows = []
    for route in app.routes:
        if isinstance(route, APIRoute):
            methods = ",".join(sorted(route.methods - {"HEAD", "OPTIONS"}))
            rows.append((methods, route.path, route.name))
    return sorted(rows, key=lambda r: (r[1], r[0]))


def cors_origins() -> list[str]:
    raw = os.environ.get("LAYERLINT_CORS_ORIGINS", DEFAULT_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    for methods, path, name in route_table(app):
        logger.info("route %-10s %-28s %s", methods, path, name)

    engine = get_engine()
    ids = ", ".join(str(d.id) for d in engine.describe_layers())
    logger.info("engine ready: layers [%s], cache capacity %d", ids, engine.config.cache_capacity)
    yield


app = FastAPI(title="layerlint API", version=VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(layers.router)
app.include_router(runs.router)
app.include_router(analyze.router)


@app.get("/")
async def root():
    return {
        "name": "layerlint API",
        "version": VERSION,
        "layers": len(get_engine().describe_layers()),
    }
