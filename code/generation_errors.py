"""Exceptions raised by the map generation pipeline."""

from __future__ import annotations


class InvalidDimensionsError(ValueError):
    """Requested map width or height is not positive."""


class ContradictionError(RuntimeError):
    """A cell's candidate domain became empty during cell-collapse synthesis."""

    def __init__(self, x: int, y: int) -> None:
        super().__init__(f"Cell ({x}, {y}) has no remaining candidates")
        self.x = x
        self.y = y


class PlacementError(RuntimeError):
    """Terrain offered no tile suitable for a required feature."""
