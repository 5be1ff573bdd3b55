"""Tests for package-level functionality."""

import archive_sentinel


def test_package_imports() -> None:
    """Verify the package imports correctly."""
    from archive_sentinel import __version__

    assert __version__
    assert isinstance(__version__, str)


def test_version_format() -> None:
    """Verify the version follows expected format."""
    from archive_sentinel import __version__

    parts = __version__.split(".")
    assert len(parts) >= 2, f"Version should have at least major.minor: {__version__}"


def test_public_api_exports() -> None:
    """Every name in __all__ resolves on the package."""
    for name in archive_sentinel.__all__:
        assert hasattr(archive_sentinel, name), name
