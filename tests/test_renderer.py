"""
Tests for the Renderer module.
"""

import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from digital_rain.drop import RainDropStyle
from digital_rain.renderer import FrameBuffer, RendererProtocol


class TestRendererProtocol:
    def test_cannot_instantiate_abstract(self):
        with pytest.raises(TypeError):
            RendererProtocol()

    def test_minimal_subclass(self):
        class Collector(RendererProtocol):
            def __init__(self):
                self.points = []

            def draw(self, column, row, character, style):
                self.points.append((column, row, character, style))

        collector = Collector()
        collector.begin_frame(10, 10)
        collector.draw(1, 2, 'x', RainDropStyle.FRONT)
        collector.end_frame()
        assert collector.points == [(1, 2, 'x', RainDropStyle.FRONT)]


class TestFrameBuffer:
    def test_draw_inside(self):
        buffer = FrameBuffer()
        buffer.begin_frame(4, 3)
        buffer.draw(1, 2, 'a', RainDropStyle.BACK)
        buffer.end_frame()
        assert buffer.cells == {(1, 2): ('a', RainDropStyle.BACK)}
        assert buffer.visible_cells == 1
        assert buffer.clipped == 0
        assert buffer.frames == 1

    @pytest.mark.parametrize("column,row", [(4, 0), (0, 3), (-1, 1), (1, -1), (10, 10)])
    def test_clipping(self, column, row):
        buffer = FrameBuffer()
        buffer.begin_frame(4, 3)
        buffer.draw(column, row, 'a', RainDropStyle.BACK)
        assert buffer.visible_cells == 0
        assert buffer.clipped == 1

    def test_later_draw_wins(self):
        buffer = FrameBuffer()
        buffer.begin_frame(4, 3)
        buffer.draw(0, 0, 'a', RainDropStyle.BACK)
        buffer.draw(0, 0, 'b', RainDropStyle.FRONT)
        assert buffer.cells[(0, 0)] == ('b', RainDropStyle.FRONT)

    def test_begin_frame_clears(self):
        buffer = FrameBuffer()
        buffer.begin_frame(4, 3)
        buffer.draw(0, 0, 'a', RainDropStyle.BACK)
        buffer.draw(9, 9, 'a', RainDropStyle.BACK)
        buffer.end_frame()
        buffer.begin_frame(4, 3)
        assert buffer.cells == {}
        assert buffer.clipped == 0
        assert buffer.frames == 1

    def test_rows(self):
        buffer = FrameBuffer()
        buffer.begin_frame(3, 2)
        buffer.draw(0, 0, 'a', RainDropStyle.FADING)
        buffer.draw(2, 1, 'z', RainDropStyle.GRADIENT)
        assert buffer.rows() == ['a  ', '  z']
