"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planchat import __version__
from planchat.config import settings
from planchat.routers import proxy

# ── Logging setup ────────────────────────────────────────────────────
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
if settings.env == "development":
    logging.getLogger("planchat.adapters.agent_api").setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if settings.upstream_base_url:
        logger.info("Relaying to agent API at %s (app %s)", settings.upstream_base_url, settings.app_name)
    else:
        logger.warning("EXTERNAL_API_BASE_URL is not set, /api/proxy will answer 500")

    app.state.http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.upstream_timeout))

    yield

    # Shutdown
    await app.state.http_client.aclose()


app = FastAPI(
    title="planchat",
    description="Chat relay for a remote planning agent",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(proxy.router, prefix="/api/proxy", tags=["proxy"])


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "service": "planchat",
        "upstream_configured": settings.upstream_base_url is not None,
        "app_name": settings.app_name,
    }
