from fastapi import Request

from calfeed.core.config import Settings
from calfeed.services.feed.refresh import FeedRefresher
from calfeed.services.feed.store import FeedStore


def get_store(request: Request) -> FeedStore:
    return request.app.state.store


def get_refresher(request: Request) -> FeedRefresher:
    return request.app.state.refresher


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
