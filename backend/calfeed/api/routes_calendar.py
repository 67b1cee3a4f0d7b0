import logging
from html import escape
from typing import BinaryIO, Iterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, StreamingResponse

from calfeed.api.deps import get_settings, get_store
from calfeed.core.config import Settings
from calfeed.services.feed.store import FeedStore

logger = logging.getLogger(__name__)

router = APIRouter()

CHUNK_SIZE = 64 * 1024

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _iter_file(fh: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = fh.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        fh.close()


@router.get("/calendar.ics")
def get_calendar(store: FeedStore = Depends(get_store)):
    # El handle se abre antes de responder: aunque un refresh reemplace el
    # archivo a mitad del envío, seguimos leyendo la versión anterior completa.
    try:
        fh = store.open()
    except FileNotFoundError:
        return PlainTextResponse("Calendar file not found", status_code=404)
    except OSError as e:
        logger.error("Error reading ICS file: %s", e)
        return PlainTextResponse("Error reading calendar file", status_code=500)

    headers = {
        **NO_CACHE_HEADERS,
        "Content-Disposition": 'attachment; filename="calendar.ics"',
    }
    return StreamingResponse(
        _iter_file(fh),
        media_type="text/calendar; charset=utf-8",
        headers=headers,
    )


def _feed_url(request: Request, settings: Settings) -> str:
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/") + "/calendar.ics"
    return str(request.url_for("get_calendar"))


@router.get("/subscribe", response_class=HTMLResponse)
def subscribe_page(request: Request, settings: Settings = Depends(get_settings)):
    url = _feed_url(request, settings)
    webcal = "webcal://" + url.split("://", 1)[-1]
    return f"""<!doctype html>
<html lang="de">
<head><meta charset="utf-8"><title>Stundenplan abonnieren</title></head>
<body>
  <h1>Stundenplan abonnieren</h1>
  <p>Kalender-URL: <code>{escape(url)}</code></p>
  <p><a href="{escape(webcal, quote=True)}">In Kalender-App abonnieren</a></p>
  <p><a href="{escape(url, quote=True)}">calendar.ics herunterladen</a></p>
</body>
</html>
"""
