# src/player/routes.py
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlalchemy.orm import Session
from typing import Optional
from player.services import PlaylistExporter, PlayerApiService, PLAYLIST_MEDIA_TYPE, content_disposition
from database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["player"])


@router.get("/api/playlist/{username}")
def download_playlist(
    username: str,
    request: Request,
    auth: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Download the M3U playlist of an entitled subscriber."""
    exporter = PlaylistExporter(db)
    decision = exporter.authorize(username, auth)
    if not decision.granted:
        status_code, message = exporter.denial(decision)
        return PlainTextResponse(message, status_code=status_code)

    subscriber = decision.subscriber
    response = Response(
        content=exporter.document(subscriber),
        media_type=PLAYLIST_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(subscriber.username)},
    )
    exporter.trace(subscriber, request)
    return response


@router.get("/player_api.php")
def player_api(
    request: Request,
    username: Optional[str] = None,
    password: Optional[str] = None,
    action: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Player credential API; always answers 200 with a JSON body."""
    try:
        return JSONResponse(PlayerApiService(db).handle(username, password, action, request))
    except Exception as e:
        db.rollback()
        logger.error(f"player_api failure for '{username}' action={action}: {e}", exc_info=True)
        return JSONResponse({"error": "API error"})
