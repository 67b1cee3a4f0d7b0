# calfeed/main.py
from __future__ import annotations

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from dotenv import load_dotenv

from calfeed.api.deps import get_refresher, get_store
from calfeed.api.routes_calendar import router as calendar_router
from calfeed.core.config import BACKEND_ROOT, Settings
from calfeed.core.logging import configure_logging
from calfeed.services.feed.filters import FilterRule
from calfeed.services.feed.refresh import FeedRefresher
from calfeed.services.feed.store import FeedStore
from calfeed.workers.jobs import start_scheduler, stop_scheduler


load_dotenv(dotenv_path=BACKEND_ROOT / ".env", override=False)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="calfeed - gefilterter Stundenplan")

    store = FeedStore(settings.ics_local_path)
    app.state.settings = settings
    app.state.store = store
    app.state.refresher = FeedRefresher(
        settings.ics_source_url,
        FilterRule(settings.blocked_phrases),
        store,
        timeout=settings.fetch_timeout_seconds,
    )
    app.state.scheduler = None

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["GET", "OPTIONS"],
            allow_headers=["*"],
        )

    app.include_router(calendar_router, tags=["calendar"])

    @app.on_event("startup")
    def on_startup():
        app.state.scheduler = start_scheduler(app.state.refresher, settings)

    @app.on_event("shutdown")
    def on_shutdown():
        stop_scheduler(app.state.scheduler)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Server is running"

    @app.get("/health")
    def health_check(
        store: FeedStore = Depends(get_store),
        refresher: FeedRefresher = Depends(get_refresher),
    ):
        return {
            "status": "ok",
            "calendar_available": store.exists(),
            "refresh": refresher.status.as_dict(),
        }

    return app


app = create_app()
