import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from app.config import FALLBACK_JWT_SECRET, settings
from app.core.dependencies import get_cache_backend, get_recipe_store, get_user_store
from app.errors import StoreError
from app.routes import api, auth, external

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and make sure the flat-file stores exist."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for store in (get_recipe_store(), get_user_store()):
        store.ensure()
        logger.info("Using store file %s", store.path)
    if settings.JWT_SECRET == FALLBACK_JWT_SECRET:
        logger.warning("JWT_SECRET is not set; tokens are signed with the fallback secret")
    get_cache_backend()

    yield


# Create FastAPI app
app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Server Error"})


# Include routers
app.include_router(auth.router)
app.include_router(external.router)
app.include_router(api.router)

# Prometheus scrape endpoint
app.mount("/metrics", make_asgi_app())


# Basic health check
@app.get("/health")
def health_check():
    return {"status": "healthy"}
