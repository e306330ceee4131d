"""Tests for mdserve._errors."""

import pytest

from mdserve._errors import (
    AssetPathError,
    ConfigError,
    DeliveryError,
    MdServeError,
    RenderError,
    StartupError,
    WatchError,
)


class TestErrorHierarchy:
    """All mdserve errors inherit from MdServeError."""

    def test_base_is_exception(self) -> None:
        assert issubclass(MdServeError, Exception)

    @pytest.mark.parametrize(
        "error_cls",
        [ConfigError, StartupError, RenderError, WatchError, DeliveryError, AssetPathError],
    )
    def test_inherits_from_base(self, error_cls: type[Exception]) -> None:
        assert issubclass(error_cls, MdServeError)

    def test_catch_all_mdserve_errors(self) -> None:
        """All specific errors are catchable via MdServeError."""
        for error_cls in (ConfigError, StartupError, RenderError, WatchError, DeliveryError):
            with pytest.raises(MdServeError):
                raise error_cls("test")


class TestAssetPathError:
    """AssetPathError carries the HTTP status for the transport."""

    def test_default_status_forbidden(self) -> None:
        assert AssetPathError("nope").status == 403

    def test_not_found_status(self) -> None:
        exc = AssetPathError("missing", status=404)
        assert exc.status == 404
        assert str(exc) == "missing"
