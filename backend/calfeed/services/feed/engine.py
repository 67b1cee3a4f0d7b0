from __future__ import annotations

import logging
from dataclasses import dataclass, field

from calfeed.services.feed.filters import FilterRule
from calfeed.services.feed.normalize import to_crlf
from calfeed.services.feed.parser import CALENDAR_BEGIN, CALENDAR_END, Entry, ParsedFeed, parse_feed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemovedEntry:
    summary: str
    phrase: str


@dataclass
class CleanedFeed:
    text: str
    total_entries: int
    kept: list[Entry] = field(default_factory=list)
    removed: list[RemovedEntry] = field(default_factory=list)
    corrupt_entries: int = 0

    @property
    def kept_count(self) -> int:
        return len(self.kept)


def render_feed(parsed: ParsedFeed) -> str:
    """Reassembles a single envelope around header and body, CRLF terminated."""
    lines = [CALENDAR_BEGIN, *parsed.header]
    for block in parsed.body:
        if isinstance(block, Entry):
            lines.extend(block.lines)
        else:
            lines.append(block)
    lines.append(CALENDAR_END)
    return to_crlf(lines)


def normalize_and_filter(raw: str, rules: FilterRule) -> CleanedFeed:
    """
    Limpia un feed iCalendar crudo.

    Pasos: normaliza fin de línea, despliega líneas plegadas, valida el
    sobre VCALENDAR, separa VEVENTs, descarta los corruptos y los que
    contienen una frase bloqueada, y reconstruye el feed con CRLF.

    Raises:
        StructuralError: si faltan los marcadores BEGIN/END:VCALENDAR.
    """
    parsed = parse_feed(raw)
    total = len(parsed.entries)

    kept: list[Entry] = []
    removed: list[RemovedEntry] = []
    body: list[Entry | str] = []
    for block in parsed.body:
        if isinstance(block, Entry):
            phrase = rules.matches(block.text)
            if phrase is not None:
                logger.info(
                    "Filtering out event: %s",
                    block.summary,
                    extra={"summary": block.summary, "phrase": phrase},
                )
                removed.append(RemovedEntry(block.summary, phrase))
                continue
            kept.append(block)
        body.append(block)

    cleaned = ParsedFeed(header=parsed.header, body=body, corrupt_entries=parsed.corrupt_entries)
    logger.info(
        "Found %d events, keeping %d after filtering",
        total,
        len(kept),
        extra={"total": total, "kept": len(kept), "removed": len(removed)},
    )

    return CleanedFeed(
        text=render_feed(cleaned),
        total_entries=total,
        kept=kept,
        removed=removed,
        corrupt_entries=parsed.corrupt_entries,
    )
