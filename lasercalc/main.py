from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .database import engine, Base
from . import models  # noqa: F401  registers tables on Base.metadata
from .routers import calculators, presets, history

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("lasercalc")

# Create tables (handles new tables but won't add columns to existing ones)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.APP_NAME,
    description="Laser cutting process, material and business calculators",
    version=settings.CALCULATOR_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(calculators.router, prefix="/api")
app.include_router(presets.router, prefix="/api")
app.include_router(history.router, prefix="/api")

logger.info(f"{settings.APP_NAME} ready ({len(calculators.calculator_catalog())} calculators)")


@app.get("/health")
def health():
    return {"status": "ok", "app": "lasercalc"}
