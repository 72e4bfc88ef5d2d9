from __future__ import annotations

from fastapi import APIRouter, Body
from fastapi.responses import Response

from ..services.session_service import get_session

router = APIRouter()


@router.post("/api/sessions/{session_id}/autoplay/start")
async def autoplay_start(session_id: str, payload: dict = Body(default={})):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    raw = payload.get("intervalMs")
    try:
        interval = float(raw) if raw is not None else None
    except (TypeError, ValueError):
        return Response(status_code=400, content="Invalid intervalMs", media_type="text/plain")
    if interval is not None and interval <= 0:
        return Response(status_code=400, content="intervalMs must be > 0", media_type="text/plain")
    session.autoplay.start(interval)
    if not session.autoplay.enabled:
        return Response(status_code=409, content="No autoplay interval", media_type="text/plain")
    return {"ok": True, "autoplay": session.autoplay.to_payload()}


@router.post("/api/sessions/{session_id}/autoplay/pause")
async def autoplay_pause(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    session.autoplay.pause()
    return {"ok": True, "autoplay": session.autoplay.to_payload()}


@router.post("/api/sessions/{session_id}/autoplay/resume")
async def autoplay_resume(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    session.autoplay.resume()
    return {"ok": True, "autoplay": session.autoplay.to_payload()}
