from __future__ import annotations

import logging
from dataclasses import dataclass, field

from calfeed.services.feed.errors import StructuralError
from calfeed.services.feed.normalize import LF, unfold

logger = logging.getLogger(__name__)

CALENDAR_BEGIN = "BEGIN:VCALENDAR"
CALENDAR_END = "END:VCALENDAR"
EVENT_BEGIN = "BEGIN:VEVENT"
EVENT_END = "END:VEVENT"

WRAPPER_MARKERS = (CALENDAR_BEGIN, CALENDAR_END)


def is_marker(line: str, marker: str) -> bool:
    """Exact literal comparison of a whole logical line against a marker token."""
    return line.strip().upper() == marker


def _is_wrapper_marker(line: str) -> bool:
    return any(is_marker(line, m) for m in WRAPPER_MARKERS)


def property_value(lines: list[str] | tuple[str, ...], name: str) -> str | None:
    """
    Devuelve el valor de la primera propiedad `name` (admite parámetros,
    ej: SUMMARY;LANGUAGE=de:Titel) o None si no existe.
    """
    name = name.upper()
    for line in lines:
        head, sep, value = line.partition(":")
        if not sep:
            continue
        prop = head.split(";", 1)[0].strip().upper()
        if prop == name:
            return value.strip()
    return None


@dataclass(frozen=True)
class Entry:
    """One VEVENT block, stored as its unfolded logical lines."""

    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return LF.join(self.lines)

    @property
    def summary(self) -> str:
        return property_value(self.lines, "SUMMARY") or "Unknown"

    @property
    def uid(self) -> str | None:
        return property_value(self.lines, "UID")


@dataclass
class ParsedFeed:
    """
    Calendar split into its envelope and body.

    `header` holds the calendar-level property lines (without wrapper
    markers). `body` keeps entries and passthrough lines (other components
    such as VTIMEZONE) in source order.
    """

    header: list[str] = field(default_factory=list)
    body: list[Entry | str] = field(default_factory=list)
    corrupt_entries: int = 0

    @property
    def entries(self) -> list[Entry]:
        return [b for b in self.body if isinstance(b, Entry)]


def split_entries(lines: list[str]) -> list[list[str]]:
    """
    Lookahead split of the entries region at every BEGIN:VEVENT line.

    The marker stays at the start of the fragment it introduces. Fragments
    made only of whitespace are discarded.
    """
    fragments: list[list[str]] = []
    current: list[str] = []
    for line in lines:
        if is_marker(line, EVENT_BEGIN) and current:
            fragments.append(current)
            current = []
        current.append(line)
    if current:
        fragments.append(current)
    return [f for f in fragments if any(line.strip() for line in f)]


def _clean_header(lines: list[str]) -> list[str]:
    return [line for line in lines if line.strip() and not _is_wrapper_marker(line)]


def _clean_passthrough(lines: list[str]) -> list[str]:
    """
    Lines between entries. A stray wrapper marker starts a run of lines that
    belong to another calendar envelope (its VERSION, PRODID, ...); the run is
    dropped up to the next BEGIN: component.
    """
    out: list[str] = []
    skipping = False
    for line in lines:
        if not line.strip():
            continue
        if _is_wrapper_marker(line):
            skipping = True
            continue
        if skipping and line.strip().upper().startswith("BEGIN:"):
            skipping = False
        if not skipping:
            out.append(line)
    return out


def _parse_fragment(fragment: list[str]) -> tuple[Entry | None, list[str]]:
    """
    Returns the entry (BEGIN:VEVENT .. first END:VEVENT) and whatever
    follows it inside the fragment. A fragment without END:VEVENT yields
    no entry, and so does a span with a VCALENDAR marker inside it.
    """
    for idx, line in enumerate(fragment):
        if is_marker(line, EVENT_END):
            span = fragment[: idx + 1]
            rest = _clean_passthrough(fragment[idx + 1:])
            if any(_is_wrapper_marker(line) for line in span):
                return None, rest
            return Entry(tuple(span)), rest
    return None, []


def parse_feed(raw: str) -> ParsedFeed:
    """
    Unfolds `raw` and locates the calendar envelope and its entries.

    Raises StructuralError when no BEGIN:VCALENDAR / END:VCALENDAR pair can be
    found. Duplicated wrapper markers are tolerated and dropped; text before
    the first BEGIN:VCALENDAR and after the last END:VCALENDAR is discarded.
    """
    lines = unfold(raw).split(LF)

    begin_idx = next((i for i, line in enumerate(lines) if is_marker(line, CALENDAR_BEGIN)), None)
    end_idx = next(
        (i for i in range(len(lines) - 1, -1, -1) if is_marker(lines[i], CALENDAR_END)),
        None,
    )
    if begin_idx is None:
        raise StructuralError(f"missing {CALENDAR_BEGIN} marker")
    if end_idx is None:
        raise StructuralError(f"missing {CALENDAR_END} marker")
    if end_idx < begin_idx:
        raise StructuralError(f"{CALENDAR_END} appears before {CALENDAR_BEGIN}")

    inner = lines[begin_idx + 1 : end_idx]
    first_event = next((i for i, line in enumerate(inner) if is_marker(line, EVENT_BEGIN)), None)

    parsed = ParsedFeed()
    if first_event is None:
        parsed.header = _clean_header(inner)
        return parsed

    parsed.header = _clean_header(inner[:first_event])
    for fragment in split_entries(inner[first_event:]):
        entry, rest = _parse_fragment(fragment)
        if entry is None:
            parsed.corrupt_entries += 1
            logger.debug("Dropping malformed VEVENT: %s", property_value(fragment, "SUMMARY"))
        else:
            parsed.body.append(entry)
        parsed.body.extend(rest)

    if parsed.corrupt_entries:
        logger.warning(
            "Dropped %d corrupt entries",
            parsed.corrupt_entries,
            extra={"corrupt": parsed.corrupt_entries},
        )
    return parsed
