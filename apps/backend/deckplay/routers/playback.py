from __future__ import annotations

import logging

from fastapi import APIRouter, Body
from fastapi.responses import Response

from ..services.session_service import get_session

logger = logging.getLogger("deckplay.routers.playback")

router = APIRouter()


@router.post("/api/sessions/{session_id}/next")
async def playback_next(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    session.controller.next()
    return session.frame()


@router.post("/api/sessions/{session_id}/prev")
async def playback_prev(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    session.controller.prev()
    return session.frame()


@router.post("/api/sessions/{session_id}/goto")
async def playback_goto(session_id: str, payload: dict = Body(...)):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    try:
        slide = int(payload.get("slide"))
        fragment = int(payload.get("fragment", 0) or 0)
    except (TypeError, ValueError):
        logger.warning("goto: 400 bad payload (keys=%s)", sorted(payload.keys()))
        return Response(status_code=400, content="Missing slide", media_type="text/plain")
    # Out-of-range targets are ignored by the controller; the frame shows the unchanged state.
    session.controller.go_to_slide(slide, fragment)
    return session.frame()


@router.post("/api/sessions/{session_id}/presenter")
async def playback_presenter(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    session.controller.toggle_presenter_mode()
    return session.frame()


@router.post("/api/sessions/{session_id}/fullscreen")
async def playback_fullscreen(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    session.toggle_fullscreen()
    return session.frame()


@router.post("/api/sessions/{session_id}/key")
async def playback_key(session_id: str, payload: dict = Body(...)):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    key = payload.get("key")
    if not isinstance(key, str) or not key:
        return Response(status_code=400, content="Missing key", media_type="text/plain")
    handled = session.handle_key(key)
    return {"handled": handled, "frame": session.frame()}


@router.post("/api/sessions/{session_id}/click")
async def playback_click(session_id: str, payload: dict = Body(...)):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    try:
        x = float(payload.get("x"))
        width = float(payload.get("width"))
    except (TypeError, ValueError):
        return Response(status_code=400, content="Missing x/width", media_type="text/plain")
    session.handle_click(x, width)
    return session.frame()
