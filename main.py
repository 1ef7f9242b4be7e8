from __future__ import annotations

import sys
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.requests import Request
from starlette.responses import JSONResponse

from config import settings
from services.errors import GameError
from services.registry import build_registry
from services.seed import seed_demo_players

# ───────── ROUTERS ─────────
from routers.battle import router as battle_router
from routers.market import router as market_router
from routers.profile import router as profile_router
from routers.ratings import router as ratings_router
from routers.shop import router as shop_router

logger.remove()
logger.add(sys.stderr, level=settings.log_level.upper())

START_TIME = time.time()

app = FastAPI(title="PixelArena API", version=settings.app_version)

# ─────────────────────────────────────────────
# CORS
# ─────────────────────────────────────────────
allowed_origins = {
    "http://localhost:3000",
    "https://web.telegram.org",
    "https://telegram.org",
    "https://t.me",
}
if settings.frontend_origin:
    allowed_origins.add(settings.frontend_origin)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(allowed_origins),
    allow_origin_regex=r"^https:\/\/([a-z0-9-]+\.)*(railway\.app|telegram\.org|t\.me)$",
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ─────────────────────────────────────────────
# ПОМИЛКИ ГРИ -> JSON
# ─────────────────────────────────────────────
@app.exception_handler(GameError)
async def game_error_handler(request: Request, exc: GameError):
    logger.debug(f"{request.method} {request.url.path} -> {exc.status} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status, content=exc.as_dict())


# ─────────────────────────────────────────────
# STARTUP
# ─────────────────────────────────────────────
@app.on_event("startup")
async def startup_event():
    # тести підкладають свій registry до старту
    if getattr(app.state, "registry", None) is None:
        app.state.registry = build_registry(settings)

    if settings.seed_demo_players:
        seed_demo_players(app.state.registry)


@app.get("/")
async def root():
    return {"status": "ok", "message": "PixelArena API is running", "version": settings.app_version}


@app.get("/health")
def health(request: Request):
    counts = request.app.state.registry.counts()
    return {
        "status": "healthy",
        "version": settings.app_version,
        **counts,
        "uptime": round(time.time() - START_TIME, 1),
    }


# ─────────────────────────────────────────────
# ROUTERS
# ─────────────────────────────────────────────
app.include_router(profile_router)
app.include_router(battle_router, prefix="/api")
app.include_router(shop_router)
app.include_router(market_router)
app.include_router(ratings_router)
