# release_crawler/errors.py


class ReleaseCrawlerError(Exception):
    """Base class for every error the crawler raises on purpose."""


class RemoteServiceError(ReleaseCrawlerError):
    """Count or scroll request against the search service failed."""


class MalformedRecordError(ReleaseCrawlerError):
    """A fetched release is missing fields or carries unexpected ones."""

    def __init__(self, message, record=None):
        super().__init__(message)
        self.record = record


class MalformedDateError(ReleaseCrawlerError):
    """A release date could not be parsed as ISO-8601."""


class MissingMappingError(ReleaseCrawlerError):
    """A release references an author or distribution with no assigned id."""


class FileIOError(ReleaseCrawlerError):
    """An output CSV could not be opened, written or closed."""
