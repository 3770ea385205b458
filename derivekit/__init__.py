"""derivekit - Object protocol code generator for record definitions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("derivekit")
except PackageNotFoundError:
    __version__ = "(local)"
