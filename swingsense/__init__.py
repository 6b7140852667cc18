"""SwingSense: real-time swing detection from wearable IMU streams."""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

try:
    __version__: str = version("swingsense")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
