"""Shared constants for the tile map generator."""

from __future__ import annotations

# Tile character codes used by the map text format.
WALL = "#"
EMPTY = "+"
SPIKE = "*"
GOAL = ":"
START = "x"
SAFE_ZONE = "S"  # Cosmetic; behaves exactly like EMPTY.
PORTAL_CHARS = "0123456789"

MAX_PORTAL_IDS = len(PORTAL_CHARS)

# Every generation strategy clamps requested dimensions up to at least this size.
MIN_MAP_WIDTH = 10
MIN_MAP_HEIGHT = 8

DEFAULT_MAX_ATTEMPTS = 5
