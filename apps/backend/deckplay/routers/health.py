from __future__ import annotations

from fastapi import APIRouter

from ..state import STATE

router = APIRouter()


@router.get("/api/health")
def health():
    return {"ok": True, "sessions": len(STATE.sessions)}
