"""
Renderer Protocol Interface

Defines the interface a renderer implements to receive drop coordinates
from a Field. Mapping styles to colors or glyph attributes is entirely
up to the renderer.

Usage:
    from digital_rain.renderer import RendererProtocol

    class MyRenderer(RendererProtocol):
        def draw(self, column, row, character, style):
            ...
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from .drop import RainDropStyle


class RendererProtocol(ABC):
    """
    Abstract interface for anything that draws rain.

    A Field calls begin_frame(), then draw() once per projected point,
    then end_frame(). Points may lie outside the screen; renderers clip.
    """

    def begin_frame(self, width: int, height: int):
        """Called before the first point of a frame."""

    @abstractmethod
    def draw(self, column: int, row: int, character: str, style: RainDropStyle):
        """Draw a single character."""
        pass

    def end_frame(self):
        """Called after the last point of a frame."""


class FrameBuffer(RendererProtocol):
    """
    Headless renderer that keeps the last frame in memory.

    Points outside the screen are counted in ``clipped`` and dropped.
    When two drops share a cell the later one wins.
    """

    def __init__(self):
        self.width = 0
        self.height = 0
        self.cells: Dict[Tuple[int, int], Tuple[str, RainDropStyle]] = {}
        self.clipped = 0
        self.frames = 0

    def begin_frame(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells = {}
        self.clipped = 0

    def draw(self, column: int, row: int, character: str, style: RainDropStyle):
        if 0 <= column < self.width and 0 <= row < self.height:
            self.cells[(column, row)] = (character, style)
        else:
            self.clipped += 1

    def end_frame(self):
        self.frames += 1

    @property
    def visible_cells(self) -> int:
        return len(self.cells)

    def rows(self) -> List[str]:
        """Plain-text rows of the last frame, spaces for empty cells."""
        grid = [[' '] * self.width for _ in range(self.height)]
        for (column, row), (character, _) in self.cells.items():
            grid[row][column] = character
        return [''.join(line) for line in grid]
