import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from steadcore.config import get_settings
from steadcore.routers import content
from steadcore.services.rules import get_config

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Steadcore API")
    logger.debug("Debug mode: %s", settings.DEBUG)

    # Missing or broken content fails startup
    config = get_config()
    logger.info(
        "Content ready: items=%d, plants=%d",
        len(config.possession_archetypes),
        len(config.plant_archetypes),
    )

    yield

    logger.info("Shutting down Steadcore API")


app = FastAPI(
    title="Steadcore API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(content.router, prefix="/api/v1")
logger.debug("Routers registered: /api/v1/content")


@app.get("/")
def root():
    return {"message": "Steadcore API"}


@app.get("/health")
def health():
    return {"status": "healthy"}
