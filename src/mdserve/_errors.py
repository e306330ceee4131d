"""mdserve error hierarchy.

All mdserve-specific errors inherit from MdServeError for easy catching.
"""


class MdServeError(Exception):
    """Base error for all mdserve operations."""


class ConfigError(MdServeError):
    """Invalid or missing configuration."""


class StartupError(MdServeError):
    """The server cannot start (initial render, missing file, busy port)."""


class RenderError(MdServeError):
    """The document could not be rendered to HTML."""


class WatchError(MdServeError):
    """The watched file was lost or the watch backend failed."""


class DeliveryError(MdServeError):
    """A reload notification could not be delivered to one viewer."""


class AssetPathError(MdServeError):
    """An asset reference is outside the document directory or missing.

    Attributes:
        status: HTTP status the transport should answer with (403 or 404).

    """

    def __init__(self, message: str, *, status: int = 403) -> None:
        super().__init__(message)
        self.status = status
