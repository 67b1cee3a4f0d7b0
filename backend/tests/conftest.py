import pytest

from calfeed.services.feed.filters import FilterRule


def make_event(uid: str, summary: str, extra: str = "") -> str:
    return (
        "BEGIN:VEVENT\r\n"
        f"UID:{uid}\r\n"
        "DTSTART:20251006T081500Z\r\n"
        "DTEND:20251006T094500Z\r\n"
        f"SUMMARY:{summary}\r\n"
        f"{extra}"
        "END:VEVENT\r\n"
    )


HEADER = (
    "BEGIN:VCALENDAR\r\n"
    "VERSION:2.0\r\n"
    "PRODID:-//HWR Berlin//Stundenplan//DE\r\n"
    "CALSCALE:GREGORIAN\r\n"
    "METHOD:PUBLISH\r\n"
)


def make_feed(*events: str) -> str:
    return HEADER + "".join(events) + "END:VCALENDAR\r\n"


@pytest.fixture
def three_event_feed() -> str:
    return make_feed(
        make_event("1", "Datenbanken"),
        make_event("2", "Lean Management Vorlesung"),
        make_event("3", "Software Engineering"),
    )


@pytest.fixture
def rules() -> FilterRule:
    return FilterRule(["Lean Management", "Ökonometrie"])
