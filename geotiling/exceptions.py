"""Tiling-specific exceptions for consistent error handling."""

from typing import Optional


class TilingError(Exception):
    """Base tiling error."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.original_exception = original_exception


class InvalidAddressError(TilingError, ValueError):
    """Raised when a tile address or location code cannot identify a tile."""
    pass


class SizeMismatchError(TilingError, ValueError):
    """Raised when an operation needs two tiles of the same size."""
    pass


class InvalidCharacterError(TilingError, ValueError):
    """Raised when a character is not part of the code alphabet."""
    pass


class InvalidPolygonError(TilingError, ValueError):
    """Raised when a polygon has fewer than three valid vertices."""
    pass
