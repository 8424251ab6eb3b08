"""Installed version of reqstats."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    """Get the reqstats version from package metadata, "0.0.0" when not installed."""
    try:
        return version("reqstats")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = get_version()
