from __future__ import annotations

import logging

import httpx

from calfeed.services.feed.errors import FetchError

logger = logging.getLogger(__name__)


def fetch_ics(url: str, timeout: float = 30.0, client: httpx.Client | None = None) -> str:
    """
    Descarga el feed upstream y lo devuelve como texto.

    Cualquier fallo (red, status != 200, cuerpo no textual) se convierte en
    FetchError; no hay reintentos, el próximo tick del scheduler lo vuelve a
    intentar.
    """
    logger.info("Fetching ICS from %s", url)
    try:
        if client is None:
            with httpx.Client(timeout=timeout, follow_redirects=True) as own:
                response = own.get(url)
        else:
            response = client.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as e:
        raise FetchError(f"request to {url} failed: {e}") from e

    if response.status_code != 200:
        raise FetchError(f"upstream returned HTTP {response.status_code}")

    try:
        text = response.content.decode(response.encoding or "utf-8")
    except (UnicodeDecodeError, LookupError) as e:
        raise FetchError(f"upstream body is not decodable text: {e}") from e

    if "\x00" in text:
        raise FetchError("upstream body looks binary")
    return text
