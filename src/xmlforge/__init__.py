"""xmlforge - compile declarative XML game content into engine constructors."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("xmlforge")
except PackageNotFoundError:
    __version__ = "unknown"
