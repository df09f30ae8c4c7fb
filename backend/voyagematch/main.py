import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from voyagematch.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "voyagematch.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from voyagematch.routers import destinations, search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from voyagematch.dependencies import get_intent_extractor

    extractor = get_intent_extractor()
    if extractor.use_mock or not extractor.strategies:
        logger.info("Intent extraction: keyword fallback only")
    else:
        logger.info(f"Intent extraction cascade: {', '.join(s.name for s in extractor.strategies)}")

    yield

    # Shutdown
    from voyagematch.database import engine

    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="VoyageMatch",
    description="Flight + accommodation package search",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search.router, prefix="/api/search", tags=["search"])
app.include_router(destinations.router, prefix="/api/destinations", tags=["destinations"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "voyagematch"}
