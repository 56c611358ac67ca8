"""Writes accepted maps to numbered text files."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Union

from map_document import MapDocument

logger = logging.getLogger(__name__)

MAP_FILE_PATTERN = re.compile(r"^map(\d+)\.txt$")


class MapWriter:
    """Saves maps as ``map<N>.txt``, continuing after the highest existing N."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def next_index(self) -> int:
        if not self.directory.is_dir():
            return 1
        indices = [
            int(match.group(1))
            for match in (MAP_FILE_PATTERN.match(path.name) for path in self.directory.iterdir())
            if match is not None
        ]
        return max(indices, default=0) + 1

    def write(self, document: MapDocument) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"map{self.next_index()}.txt"
        path.write_text(document.to_text(), encoding="utf-8")
        logger.info("wrote %dx%d map to %s", document.width, document.height, path)
        return path
