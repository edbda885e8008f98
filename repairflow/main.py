from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from repairflow.api.routes import router as api_router
from repairflow.core.config import get_settings
from repairflow.core.database import dispose_db, init_db

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title=settings.app_name)


@app.on_event("startup")
async def startup_event() -> None:
    await init_db()
    logger.info("%s started", settings.app_name)


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await dispose_db()


app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.allow_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
