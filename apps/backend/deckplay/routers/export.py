from __future__ import annotations

import logging

from fastapi import APIRouter, Body
from fastapi.responses import Response

from ..content_loader import parse_deck
from ..services.deck import DeckError
from ..services.export_service import export_deck

logger = logging.getLogger("deckplay.routers.export")

router = APIRouter()


@router.post("/api/export")
def export(payload: dict = Body(...)):
    """
    Deterministic styles for every step plus sampled transition frames.

    Payload: { "deck": {...}, "fps"?: 60 }
    """
    try:
        fps = float(payload.get("fps", 60) or 60)
    except (TypeError, ValueError):
        return Response(status_code=400, content="Invalid fps", media_type="text/plain")
    if not (1 <= fps <= 240):
        return Response(status_code=400, content="fps out of range", media_type="text/plain")
    try:
        deck = parse_deck(payload.get("deck"))
    except DeckError as e:
        logger.warning("export: 400 invalid deck: %s", e)
        return Response(status_code=400, content=f"Invalid deck: {e}", media_type="text/plain")
    return export_deck(deck, fps=fps)
