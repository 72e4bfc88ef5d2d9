from __future__ import annotations

import logging

from fastapi import APIRouter, Body
from fastapi.responses import Response

from ..content_loader import load_deck, parse_deck
from ..services.deck import DeckError
from ..services.session_service import create_session, drop_session, get_session

logger = logging.getLogger("deckplay.routers.sessions")

router = APIRouter()


@router.post("/api/sessions")
async def session_create(payload: dict = Body(...)):
    """
    Payload:
      { "deck": { ...deck json... } | omitted to load deck.json from the presentation dir,
        "loop"?: false, "initialSlide"?: 0, "initialFragment"?: 0, "autoplayMs"?: null }
    """
    raw_deck = payload.get("deck")
    try:
        deck = parse_deck(raw_deck) if raw_deck is not None else load_deck()
    except DeckError as e:
        logger.warning("session_create: 400 invalid deck: %s", e)
        return Response(status_code=400, content=f"Invalid deck: {e}", media_type="text/plain")
    except FileNotFoundError as e:
        return Response(status_code=404, content=str(e), media_type="text/plain")

    try:
        session = create_session(deck, payload)
    except (TypeError, ValueError) as e:
        logger.warning("session_create: 400 invalid options: %s", e)
        return Response(status_code=400, content=f"Invalid options: {e}", media_type="text/plain")
    return {"ok": True, "sessionId": session.id, "frame": session.frame()}


@router.get("/api/sessions/{session_id}")
async def session_frame(session_id: str):
    session = get_session(session_id)
    if isinstance(session, Response):
        return session
    return session.frame()


@router.delete("/api/sessions/{session_id}")
async def session_delete(session_id: str):
    return drop_session(session_id)
