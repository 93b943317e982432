"""
Map frame renderer - draws the world grid and info panel onto a Canvas.

Layers, bottom to top:
- Band rectangles: shading and edges (hidden when the band layer is off)
- Highlighted band rectangle under the cursor
- Equator, cursor and click marker
- Info panel (cursor clock, UTC clock, clicked location, search status)

The map is an equirectangular projection centered on the view longitude and
wraps around the antimeridian. Band rectangles carry web-map style weights
and opacities; the renderer turns those into edge and shade characters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import numpy as np

from ..core.bands import (
    all_bands,
    band_for_offset,
    format_latlon,
    format_local_time,
    format_offset,
    format_utc,
    normalize_lon,
    offsets_from_lons,
)
from ..core.state import LookupPhase, SessionState
from .canvas import Brush, Canvas, Color

PANEL_HEIGHT = 6
PLACEHOLDER = "—"

# Style thresholds: strong outlines and fills stand out from the layer
HEAVY_WEIGHT = 1.0
STRONG_OPACITY = 0.5
DENSE_FILL = 0.1


@dataclass(frozen=True)
class BandRect:
    """Drawable rectangle for one band, styled like a web map overlay."""

    offset: int
    west: float
    east: float
    south: float
    north: float
    current: bool = False

    @property
    def weight(self) -> float:
        return 1.2 if self.current else 0.6

    @property
    def opacity(self) -> float:
        return 0.6 if self.current else 0.25

    @property
    def fill_opacity(self) -> float:
        return 0.16 if self.current else 0.06

    @property
    def empty(self) -> bool:
        """Bands clamped entirely past the antimeridian have no area."""
        return self.east <= self.west

    def columns(self, lons: np.ndarray) -> np.ndarray:
        """Mask of column longitudes inside [west, east)."""
        return (lons >= self.west) & (lons < self.east)

    def rows(self, lats: np.ndarray) -> np.ndarray:
        """Mask of row latitudes inside [south, north]."""
        return (lats >= self.south) & (lats <= self.north)

    @property
    def fill_char(self) -> str:
        return Brush.SHADE_MED if self.fill_opacity >= DENSE_FILL else Brush.SHADE_LIGHT

    @property
    def edge_char(self) -> str:
        return "┃" if self.weight >= HEAVY_WEIGHT else "│"

    @property
    def color(self) -> Color:
        return Color.BRIGHT_YELLOW if self.opacity >= STRONG_OPACITY else Color.BLUE


class MapRenderer:
    """Renders a :class:`SessionState` into a character grid."""

    def __init__(self, width: int = 72, height: int = 24, lat_limit: float = 85.0):
        if width < 8 or height < 4:
            raise ValueError(f"Map too small: {width}x{height}")
        self.width = width
        self.height = height
        self.lat_limit = lat_limit
        self.canvas = Canvas(width, height + PANEL_HEIGHT)
        self._rects = [self._rect(band.offset) for band in all_bands()]
        self._current_band: Optional[BandRect] = None
        self.highlight_builds = 0

    # --- Projection ---

    def column_lons(self, center_lon: float) -> np.ndarray:
        """Longitude at the middle of every map column."""
        cols = np.arange(self.width) + 0.5
        lons = center_lon - 180.0 + cols * (360.0 / self.width)
        return np.mod(lons + 180.0, 360.0) - 180.0

    def row_lats(self) -> np.ndarray:
        """Latitude at the middle of every map row, north first."""
        rows = np.arange(self.height) + 0.5
        return self.lat_limit - rows * (2 * self.lat_limit / self.height)

    def latlon_to_cell(self, lat: float, lon: float, center_lon: float) -> Optional[tuple[int, int]]:
        """Map cell containing (lat, lon), or None beyond the latitude limit."""
        if abs(lat) > self.lat_limit:
            return None
        dx = normalize_lon(lon - center_lon) + 180.0
        col = min(self.width - 1, int(dx * self.width / 360.0))
        row = min(self.height - 1, int((self.lat_limit - lat) * self.height / (2 * self.lat_limit)))
        return col, row

    # --- Band rectangles ---

    def _rect(self, offset: int, current: bool = False) -> BandRect:
        band = band_for_offset(offset)
        return BandRect(
            offset=offset,
            west=band.west,
            east=band.east,
            south=-self.lat_limit,
            north=self.lat_limit,
            current=current,
        )

    def band_rects(self) -> list[BandRect]:
        """Rectangles for the full band layer, west to east."""
        return list(self._rects)

    def highlight(self, offset: int) -> BandRect:
        """Highlighted rectangle for *offset*, rebuilt only when it changes."""
        if self._current_band is None or self._current_band.offset != offset:
            self._current_band = self._rect(offset, current=True)
            self.highlight_builds += 1
        return self._current_band

    # --- Drawing ---

    def _paint_rect(
        self,
        chars: np.ndarray,
        colors: np.ndarray,
        rect: BandRect,
        lons: np.ndarray,
        lats: np.ndarray,
        edges: np.ndarray,
        shade: bool,
    ) -> None:
        """Paint *rect* into the grids: fill if *shade*, then its west edge."""
        cols = rect.columns(lons)
        if not cols.any():
            return
        rows = rect.rows(lats)
        cells = np.ix_(rows, cols)
        if shade:
            chars[cells] = rect.fill_char
            colors[cells] = rect.color.value
        edge_cols = np.intersect1d(np.flatnonzero(cols), edges)
        if edge_cols.size:
            outline = np.ix_(rows, edge_cols)
            chars[outline] = rect.edge_char
            colors[outline] = (rect.color if rect.current else Color.GRAY).value

    def _draw_map(self, session: SessionState) -> None:
        view = session.view
        hover = session.hover
        lons = self.column_lons(view.center_lon)
        lats = self.row_lats()
        offsets = offsets_from_lons(lons)

        chars = np.full((self.height, self.width), " ", dtype="<U1")
        colors = np.full((self.height, self.width), Color.GRAY.value, dtype=int)

        if view.show_bands:
            # Columns where a new band starts
            edges = np.flatnonzero(np.diff(offsets) != 0) + 1
            for rect in self.band_rects():
                self._paint_rect(chars, colors, rect, lons, lats, edges, shade=rect.offset % 2 == 0)
            if hover.offset is not None:
                rect = self.highlight(hover.offset)
                self._paint_rect(chars, colors, rect, lons, lats, edges, shade=True)

        equator = self.latlon_to_cell(0.0, view.center_lon, view.center_lon)
        if equator is not None:
            row = equator[1]
            blank = chars[row] == " "
            chars[row, blank] = "·"

        for y in range(self.height):
            for x in range(self.width):
                self.canvas.put(x, y, str(chars[y, x]), Color(int(colors[y, x])))

        if view.show_bands:
            self._draw_band_labels(offsets)

        if hover.known:
            cell = self.latlon_to_cell(hover.lat, hover.lon, view.center_lon)
            if cell is not None:
                self.canvas.put(cell[0], cell[1], "+", Color.BRIGHT_GREEN)

        click = session.click
        if click.known:
            cell = self.latlon_to_cell(click.lat, click.lon, view.center_lon)
            if cell is not None:
                self.canvas.put(cell[0], cell[1], "X", Color.BRIGHT_RED)

    def _draw_band_labels(self, offsets: np.ndarray) -> None:
        """Offset labels along the top row, skipping ones that would overlap."""
        next_free = 0
        starts = np.flatnonzero(np.concatenate(([True], np.diff(offsets) != 0)))
        ends = np.concatenate((starts[1:], [self.width]))
        for start, end in zip(starts, ends):
            offset = int(offsets[start])
            label = f"{offset:+d}" if offset else "0"
            x = int((start + end) // 2) - len(label) // 2
            if x < next_free or x + len(label) > self.width:
                continue
            Brush.text(self.canvas, x, 0, label, Color.BRIGHT_WHITE)
            next_free = x + len(label) + 1

    def _draw_panel(self, session: SessionState, instant: Optional[datetime]) -> None:
        top = self.height
        self.canvas.fill(0, top, self.width, PANEL_HEIGHT)
        Brush.hline(self.canvas, 0, top, self.width, "─", Color.GRAY)

        hover = session.hover
        if hover.known:
            cursor = (
                f"{format_latlon(hover.lat, hover.lon)}  {format_offset(hover.offset)}  "
                f"{format_local_time(hover.offset, instant)}"
            )
        else:
            cursor = PLACEHOLDER
        Brush.text(self.canvas, 0, top + 1, f"Cursor  {cursor}", Color.BRIGHT_GREEN)

        bands = "on" if session.view.show_bands else "off"
        Brush.text(self.canvas, 0, top + 2, f"UTC     {format_utc(instant)}   bands: {bands}")

        click = session.click
        if click.known:
            clicked = (
                f"{format_latlon(click.lat, click.lon)}  {format_offset(click.offset)}  "
                f"{format_local_time(click.offset, instant)}"
            )
        else:
            clicked = PLACEHOLDER
        Brush.text(self.canvas, 0, top + 3, f"Clicked {clicked}", Color.BRIGHT_RED)

        place_color = Color.YELLOW if click.phase == LookupPhase.FAILED else Color.WHITE
        Brush.text(self.canvas, 0, top + 4, f"Place   {click.label or PLACEHOLDER}", place_color)

        search = session.search
        if search.busy:
            status = "Searching…"
        else:
            status = search.message or "Search"
        Brush.text(self.canvas, 0, top + 5, f"Search  {status}", Color.CYAN)

    def render(self, session: SessionState, instant: Optional[datetime] = None) -> Canvas:
        """Draw a full frame. *instant* defaults to now."""
        if instant is None:
            instant = datetime.now(timezone.utc)
        self._draw_map(session)
        self._draw_panel(session, instant)
        return self.canvas
