"""
Exceptions raised by tilekeeper.
"""


class TemplateError(ValueError):
    """Raised when a URL template references a value that was not provided."""

    pass


class TileNotFoundError(Exception):
    """Raised when a tile key is not present in the store."""

    pass


class StorageUnavailableError(Exception):
    """
    The tile database could not be opened or migrated. Every store request
    fails with this error until the handle is reset.
    """

    pass


class StorageIOError(Exception):
    """An individual store operation failed."""

    pass


class FetchFailedError(Exception):
    """A tile download returned a non-2xx status or failed in transport."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request for {url} failed: {reason}")
