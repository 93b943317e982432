"""
Canvas and brush system for the terminal map.

Core design:
- Canvas: 2D grid of (char, color) cells
- Brush: Functions that paint onto a canvas

Block character reference:
  Shades:  ░ (light) ▒ (medium)
  Lines:   │ ┃ ─
"""

from dataclasses import dataclass
from enum import Enum


class Color(Enum):
    """ANSI 256-color codes for canvas cells. Value is the color number."""
    RESET = -1

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    CYAN = 6
    WHITE = 7

    GRAY = 8
    BRIGHT_RED = 9
    BRIGHT_GREEN = 10
    BRIGHT_YELLOW = 11
    BRIGHT_BLUE = 12
    BRIGHT_CYAN = 14
    BRIGHT_WHITE = 15

    def ansi_fg(self) -> str:
        """Get ANSI foreground escape code."""
        if self == Color.RESET:
            return "\033[0m"
        return f"\033[38;5;{self.value}m"


@dataclass
class Cell:
    """A single canvas cell with character and color."""
    char: str = " "
    fg: Color = Color.WHITE

    def render(self) -> str:
        """Render cell to ANSI string."""
        return f"{self.fg.ansi_fg()}{self.char}{Color.RESET.ansi_fg()}"


class Canvas:
    """2D grid of cells for drawing."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells: list[list[Cell]] = [
            [Cell() for _ in range(width)] for _ in range(height)
        ]

    def __getitem__(self, pos: tuple[int, int]) -> Cell:
        x, y = pos
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.cells[y][x]
        return Cell()  # Out of bounds returns empty cell

    def put(self, x: int, y: int, char: str, fg: Color = Color.WHITE):
        """Put a single character at position (silently clipped)."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.cells[y][x] = Cell(char, fg)

    def fill(self, x: int, y: int, w: int, h: int, char: str = " ", fg: Color = Color.WHITE):
        """Fill a rectangle with a character."""
        for dy in range(h):
            for dx in range(w):
                self.put(x + dx, y + dy, char, fg)

    def render(self) -> str:
        """Render canvas to ANSI string."""
        return "\n".join("".join(cell.render() for cell in row) for row in self.cells)

    def rows(self) -> list[str]:
        return ["".join(cell.char for cell in row) for row in self.cells]

    def render_plain(self) -> str:
        """Render canvas without colors (plain text)."""
        return "\n".join(self.rows())


class Brush:
    """Drawing primitives (static methods that paint onto a canvas)."""

    SHADE_LIGHT = "░"
    SHADE_MED = "▒"

    @staticmethod
    def hline(canvas: Canvas, x: int, y: int, length: int, char: str = "─", color: Color = Color.WHITE):
        """Draw a horizontal line."""
        for i in range(length):
            canvas.put(x + i, y, char, color)

    @staticmethod
    def text(canvas: Canvas, x: int, y: int, text: str, color: Color = Color.WHITE):
        """Draw text horizontally, clipped at the canvas edge."""
        for i, char in enumerate(text):
            canvas.put(x + i, y, char, color)
