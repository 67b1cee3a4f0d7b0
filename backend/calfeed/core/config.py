# calfeed/core/config.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


BACKEND_ROOT = Path(__file__).resolve().parents[2]
ENV_PATH = BACKEND_ROOT / ".env"

DEFAULT_SOURCE_URL = (
    "https://moodle.hwr-berlin.de/fb2-stundenplan/download.php"
    "?doctype=.ics&url=./fb2-stundenplaene/wi/semester5/kursa"
)

# Courses not taken this semester
DEFAULT_BLOCKED_PHRASES = [
    "Cross Cultural Management",
    "Ethik in Wirtschaft und Gesellschaft",
    "Recht der Künstlichen Intelligenz",
    "Supply Chain Management",
    "Lean Management",
    "Nachhaltiges Wirtschaften",
    "Wirtschaftsenglisch",
    "Ökonometrie",
    "Trends und Zukunft der WI",
    "Theoretische Informatik",
    "Angewandte Wohlfahrtsstaatentheorie",
]


class Settings(BaseSettings):
    # Upstream feed
    ics_source_url: str = DEFAULT_SOURCE_URL
    fetch_timeout_seconds: float = 30.0

    # BLOCKED_PHRASES acepta JSON (["a", "b"]) o lista separada por comas
    blocked_phrases: Annotated[list[str], NoDecode] = DEFAULT_BLOCKED_PHRASES

    # Artefacto publicado
    ics_local_path: Path = BACKEND_ROOT / "data" / "calendar.ics"

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000
    enable_cors: bool = True
    public_base_url: str | None = None

    # Scheduler / jobs
    # DISABLE_SCHEDULER=true para evitar jobs en startup
    disable_scheduler: bool = False
    refresh_interval_hours: float = 6.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH) if ENV_PATH.exists() else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("blocked_phrases", mode="before")
    @classmethod
    def _split_phrases(cls, value):
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("["):
                value = json.loads(raw)
            else:
                value = raw.split(",")
        return [str(p).strip() for p in value if str(p).strip()]

    @field_validator("refresh_interval_hours", "fetch_timeout_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value


settings = Settings()
