class FeedError(Exception):
    """Base class for failures that abort a refresh cycle."""


class FetchError(FeedError):
    """The upstream feed could not be retrieved as text."""


class StructuralError(FeedError):
    """The feed lacks a usable calendar envelope and must not be published."""
