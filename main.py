from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from juan_heart.config.database import Database
from juan_heart.config.settings import settings
from juan_heart.api.referral import router as referral_router
from juan_heart.services.referral_store import get_referral_store
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging() -> None:
    """Console logging, plus a log file when LOG_FILE is set."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    if settings.log_file:
        handler = logging.FileHandler(settings.log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect referral storage on startup, release it on shutdown."""
    logger.info(
        f"Starting {settings.service_name} ({settings.environment}), "
        f"facility directory: {settings.facility_directory_backend}"
    )

    try:
        await Database.connect_db()
        await get_referral_store().ensure_indexes()
    except Exception as e:
        logger.error(f"Referral storage unavailable: {e}")
        raise

    yield

    await Database.close_db()
    logger.info(f"{settings.service_name} stopped")


app = FastAPI(
    title="Juan Heart - Referral & Care Navigation",
    description=(
        "Maps heart risk assessment results to care recommendations, ranks "
        "nearby healthcare facilities, and produces shareable referral summaries."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(referral_router)


async def _mongodb_status() -> str:
    try:
        await Database.get_database().command("ping")
    except Exception as e:
        logger.warning(f"MongoDB health check failed: {e}")
        return f"error: {e}"
    return "connected"


@app.get("/health")
async def health_check():
    """Liveness plus the state of referral storage and the facility directory."""
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": app.version,
        "dependencies": {
            "mongodb": await _mongodb_status(),
            "facility_directory": settings.facility_directory_backend,
        },
    }


@app.get("/")
async def root():
    return {
        "message": "Juan Heart - Referral & Care Navigation Service",
        "endpoints": [route.path for route in referral_router.routes],
        "version": app.version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.referral_service_port,
        reload=settings.environment == "development",
    )
