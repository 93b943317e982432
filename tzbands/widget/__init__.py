"""Map surface - canvas, renderer and configuration."""

from .canvas import Brush, Canvas, Cell, Color
from .config import ExplorerConfig
from .renderer import BandRect, MapRenderer

__all__ = [
    "Brush",
    "Canvas",
    "Cell",
    "Color",
    "ExplorerConfig",
    "BandRect",
    "MapRenderer",
]
