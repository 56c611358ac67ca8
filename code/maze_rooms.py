"""Maze-with-rooms terrain: a backtracking maze overlaid with open rooms."""

from __future__ import annotations

import logging
import random
from typing import List

from generation_config import GenerationConfig
from map_constants import EMPTY, WALL
from map_geometry import CARDINAL_DIRECTIONS, Rect, TilePos
from map_grid import Grid, carve_l_corridor
from map_models import Chamber, SynthesizedTerrain

logger = logging.getLogger(__name__)


class MazeWithRoomsSynthesizer:
    """Carves a depth-first maze on odd coordinates, then adds rooms and corridors."""

    def __init__(self, config: GenerationConfig, rng: random.Random) -> None:
        self.config = config
        self.rng = rng

    def synthesize(self) -> SynthesizedTerrain:
        grid = Grid(self.config.width, self.config.height, fill=WALL)
        self.carve_maze(grid)
        rooms = self.place_rooms(grid)
        for first, second in zip(rooms, rooms[1:]):
            carve_l_corridor(grid, first.center, second.center, self.rng.random() < 0.5)
        logger.debug("maze carved with %d rooms", len(rooms))
        return SynthesizedTerrain(grid=grid, chambers=rooms)

    def carve_maze(self, grid: Grid) -> None:
        """Randomized depth-first backtracking with an explicit stack of frontier cells."""
        origin = TilePos(1, 1)
        grid[origin] = EMPTY
        visited = {origin}
        stack: List[TilePos] = [origin]
        while stack:
            current = stack[-1]
            frontier = []
            for direction in CARDINAL_DIRECTIONS:
                target = current.offset(2 * direction.dx, 2 * direction.dy)
                if grid.is_interior(target.x, target.y) and target not in visited:
                    frontier.append((direction, target))
            if not frontier:
                stack.pop()
                continue
            direction, target = self.rng.choice(frontier)
            grid[current.step(direction)] = EMPTY
            grid[target] = EMPTY
            visited.add(target)
            stack.append(target)

    def place_rooms(self, grid: Grid) -> List[Chamber]:
        cfg = self.config
        max_width = min(cfg.maze_room_max_size, grid.width - 2)
        max_height = min(cfg.maze_room_max_size, grid.height - 2)
        min_width = min(cfg.maze_room_min_size, max_width)
        min_height = min(cfg.maze_room_min_size, max_height)

        rooms: List[Chamber] = []
        for _ in range(cfg.maze_room_attempts):
            if len(rooms) >= cfg.maze_max_rooms:
                break
            width = self.rng.randint(min_width, max_width)
            height = self.rng.randint(min_height, max_height)
            x = self.rng.randint(1, grid.width - 1 - width)
            y = self.rng.randint(1, grid.height - 1 - height)
            bounds = Rect(x, y, width, height)
            if any(bounds.overlaps(room.bounds.expand(1)) for room in rooms):
                continue
            grid.fill_rect(bounds, EMPTY)
            rooms.append(Chamber(index=len(rooms), bounds=bounds, walled=False))
        return rooms
