"""mdserve configuration.

ServeConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass
from pathlib import Path

from mdserve._errors import ConfigError

# Maximum document size accepted by the renderer: 10 MiB
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass(frozen=True, slots=True)
class ServeConfig:
    """Configuration for serving one Markdown document.

    Attributes:
        file: Path to the Markdown document. Always resolved to an absolute
              path on construction.
        host: Bind address.
        port: Bind port (1-65535).
        watch: Enable live reload when the document changes on disk.
        open_browser: Open the default browser once the server is up.
        max_file_size: Largest document (bytes) the renderer accepts.
        stability_ms: Quiet period before a burst of writes counts as settled.
        poll_interval_ms: Size-poll interval while waiting for writes to settle.
        highlight: Enable syntax highlighting for fenced code blocks.

    """

    file: Path
    host: str = "127.0.0.1"
    port: int = 3000
    watch: bool = False
    open_browser: bool = False
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    stability_ms: int = 100
    poll_interval_ms: int = 100
    highlight: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.file, Path):
            object.__setattr__(self, "file", Path(self.file))
        # Resolve to absolute so that watchfiles (which reports absolute
        # paths) and asset containment checks compare like with like.
        if not self.file.is_absolute():
            object.__setattr__(self, "file", self.file.resolve())

        if not 1 <= self.port <= 65535:
            msg = f'Invalid port number "{self.port}". Port must be between 1 and 65535.'
            raise ConfigError(msg)
        if self.max_file_size <= 0:
            msg = f"max_file_size must be positive, got {self.max_file_size}"
            raise ConfigError(msg)
        if self.stability_ms < 0 or self.poll_interval_ms <= 0:
            msg = "stability_ms must be >= 0 and poll_interval_ms must be > 0"
            raise ConfigError(msg)

    @property
    def base_dir(self) -> Path:
        """Directory containing the document (root for asset resolution)."""
        return self.file.parent

    @property
    def filename(self) -> str:
        """Document file name, used as the page title."""
        return self.file.name

    @property
    def url(self) -> str:
        """Local URL the document is served at."""
        host = "localhost" if self.host in ("127.0.0.1", "0.0.0.0") else self.host
        return f"http://{host}:{self.port}"
