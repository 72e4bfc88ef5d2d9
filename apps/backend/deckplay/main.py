from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import DEV_CORS_ORIGINS
from .routers import autoplay, export, health, playback, sessions
from .state import STATE

logger = logging.getLogger("deckplay.main")


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    # Cancel pending timers before the loop goes away.
    for session in list(STATE.sessions.values()):
        session.close()
    STATE.sessions.clear()
    logger.info("closed all playback sessions")


app = FastAPI(title="deckplay-backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    # The player frontend is served separately in dev; keep its origins allowed.
    allow_origins=DEV_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(sessions.router)
app.include_router(playback.router)
app.include_router(autoplay.router)
app.include_router(export.router)
