# app/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load /backend/.env (main.py is /backend/app/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from app.core.settings import settings
from app.api import api_router

from app.services.map_layers import InMemoryMap
from app.services.overlay import OverlayManager

logger = logging.getLogger(__name__)

app = FastAPI(title="Regional Alerts Backend", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        # Map editor (userscript host)
        "https://www.waze.com",
        "https://beta.waze.com",

        # Local web dev
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────
# Process-wide state: one map, one overlay manager
# ──────────────────────────────────────────────────────────────

_map = InMemoryMap()

_overlays = OverlayManager(
    map_capability=_map,
    layer_name=settings.overlay_layer_name,
    fill_opacity=settings.overlay_fill_opacity,
    stroke_width=settings.overlay_stroke_width,
)

# ──────────────────────────────────────────────────────────────
# Dependency providers
# ──────────────────────────────────────────────────────────────

def provide_map() -> InMemoryMap:
    return _map


def provide_overlay_manager() -> OverlayManager:
    return _overlays


# ──────────────────────────────────────────────────────────────
# Dependency overrides
# ──────────────────────────────────────────────────────────────

from app.api import overlay as overlay_api

app.dependency_overrides[overlay_api.get_map] = provide_map
app.dependency_overrides[overlay_api.get_overlay_manager] = provide_overlay_manager

# Routes
app.include_router(api_router)

# ──────────────────────────────────────────────────────────────
# Shutdown
# ──────────────────────────────────────────────────────────────

@app.on_event("shutdown")
def shutdown():
    logger.info("[app] Shutting down — retiring live overlay")
    try:
        _overlays.clear()
    except Exception as e:
        logger.warning(f"[app] Error retiring overlay: {e}")
