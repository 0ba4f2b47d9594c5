# backend/househunt/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import get_backend, get_settings
from ..clients import Backend
from ..config import Settings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=dict)
def health(backend: Backend = Depends(get_backend), cfg: Settings = Depends(get_settings)):
    return {"ok": True, "env": cfg.app_env, "demo_mode": backend.demo}
