from __future__ import annotations

import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable

from calfeed.services.feed.engine import CleanedFeed, normalize_and_filter
from calfeed.services.feed.errors import FeedError
from calfeed.services.feed.fetch import fetch_ics
from calfeed.services.feed.filters import FilterRule
from calfeed.services.feed.store import FeedStore

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, float], str]


@dataclass
class RefreshStatus:
    last_attempt_at: datetime | None = None
    last_success_at: datetime | None = None
    last_error: str | None = None
    total_entries: int | None = None
    kept_entries: int | None = None
    removed_entries: int | None = None
    corrupt_entries: int | None = None
    running: bool = False

    def as_dict(self) -> dict:
        data = asdict(self)
        for key in ("last_attempt_at", "last_success_at"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        return data


class FeedRefresher:
    """
    Ejecuta un ciclo fetch -> limpiar -> publicar.

    Un solo ciclo a la vez: si el anterior sigue corriendo, el tick se salta.
    Un fallo deja intacto el artefacto ya publicado.
    """

    def __init__(
        self,
        source_url: str,
        rules: FilterRule,
        store: FeedStore,
        *,
        timeout: float = 30.0,
        fetcher: Fetcher = fetch_ics,
    ):
        self.source_url = source_url
        self.rules = rules
        self.store = store
        self.timeout = timeout
        self._fetch = fetcher
        self._lock = threading.Lock()
        self.status = RefreshStatus()

    def refresh(self) -> CleanedFeed | None:
        """Returns the published feed, or None when skipped or failed."""
        if not self._lock.acquire(blocking=False):
            logger.warning("Refresh already in progress, skipping this tick")
            return None
        self.status.running = True
        self.status.last_attempt_at = datetime.now(timezone.utc)
        try:
            raw = self._fetch(self.source_url, self.timeout)
            cleaned = normalize_and_filter(raw, self.rules)
            self.store.write(cleaned.text)
            self._record_success(cleaned)
        except FeedError as e:
            self.status.last_error = f"{type(e).__name__}: {e}"
            logger.error("ICS refresh failed, keeping previous calendar: %s", self.status.last_error)
            return None
        except OSError as e:
            self.status.last_error = f"{type(e).__name__}: {e}"
            logger.error("Could not write %s, keeping previous calendar: %s", self.store.path, e)
            return None
        finally:
            self.status.running = False
            self._lock.release()

        logger.info(
            "ICS fetched and cleaned. Final events: %d (removed %d, corrupt %d)",
            cleaned.kept_count,
            len(cleaned.removed),
            cleaned.corrupt_entries,
            extra={
                "source": self.source_url,
                "total": cleaned.total_entries,
                "kept": cleaned.kept_count,
                "removed": len(cleaned.removed),
                "corrupt": cleaned.corrupt_entries,
            },
        )
        return cleaned

    def _record_success(self, cleaned: CleanedFeed) -> None:
        self.status.last_success_at = datetime.now(timezone.utc)
        self.status.last_error = None
        self.status.total_entries = cleaned.total_entries
        self.status.kept_entries = cleaned.kept_count
        self.status.removed_entries = len(cleaned.removed)
        self.status.corrupt_entries = cleaned.corrupt_entries
