#!/usr/bin/env python3
"""Terminal world timezone explorer.

ExplorerApp is the orchestration layer that wires together:
- ExplorerController: hover sampling, click/search lookups, clock tick
- PlaceResolver: cached, rate-limited reverse geocoding and search
- MapRenderer: terminal map surface and info panel
- Scheduler: 1-second clock refresh
- SessionState: single source of truth for the session

Commands are read line by line from stdin on the event loop::

    move LAT LON     pointer sample
    click LAT LON    click the map
    search TEXT      find a place
    bands            toggle the band layer
    quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import sys
from pathlib import Path
from typing import Coroutine, Optional, TextIO

from .core.cache import PlaceCache
from .core.controller import ExplorerController
from .core.overrides import build_override_table
from .core.rate_limiter import RateLimiter
from .core.scheduler import Scheduler
from .core.state import SessionState, ViewState
from .services.geocoding import NominatimClient, PlaceResolver
from .widget.config import CONFIG_PATH, ExplorerConfig
from .widget.renderer import MapRenderer

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[H\033[2J"
HELP_TEXT = "Commands: move LAT LON | click LAT LON | search TEXT | bands | quit"


class CommandError(ValueError):
    """A stdin command could not be parsed."""


def parse_latlon(args: list[str]) -> tuple[float, float]:
    if len(args) != 2:
        raise CommandError("expected LAT LON")
    try:
        lat, lon = float(args[0]), float(args[1])
    except ValueError:
        raise CommandError(f"not a coordinate: {' '.join(args)}") from None
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise CommandError(f"not a coordinate: {' '.join(args)}")
    if not -90.0 <= lat <= 90.0:
        raise CommandError(f"latitude out of range: {lat}")
    return lat, lon


class ExplorerApp:
    """Wires the explorer components to a terminal."""

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        out: TextIO = sys.stdout,
        color: bool = True,
        resolver: Optional[PlaceResolver] = None,
    ):
        self.config = config or ExplorerConfig()
        self.out = out
        self.color = color

        geo = self.config.geocoding
        map_cfg = self.config.map
        self.session = SessionState(
            cache=PlaceCache(geo.cache_size),
            limiter=RateLimiter(geo.min_interval),
            view=ViewState(
                center_lat=map_cfg.center_lat,
                center_lon=map_cfg.center_lon,
                show_bands=map_cfg.show_bands,
            ),
        )
        if resolver is None:
            client = NominatimClient(
                base_url=geo.base_url,
                user_agent=geo.user_agent,
                accept_language=geo.accept_language,
                timeout=geo.timeout,
            )
            resolver = PlaceResolver(client, self.session)
        self.resolver = resolver
        self.controller = ExplorerController(
            self.session,
            self.resolver,
            overrides=build_override_table(self.config.overrides),
        )
        self.renderer = MapRenderer(map_cfg.width, map_cfg.height, map_cfg.lat_limit)

        self.scheduler: Optional[Scheduler] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._render_pending = False
        self._tasks: set[asyncio.Task] = set()
        self._stopped: Optional[asyncio.Event] = None
        self.frames = 0

    # --- Lifecycle ---

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to *loop*: frame coalescing, state observer, clock tick."""
        self._loop = loop
        self._stopped = asyncio.Event()
        self.controller.attach(loop, self.config.clock.frame_interval)
        self.session.subscribe(self._on_state_change)
        self.scheduler = Scheduler(loop)
        self.scheduler.register("clock", self.controller.tick, self.config.clock.tick_interval)

    async def run(self, stdin: TextIO = sys.stdin) -> None:
        """Run until ``quit`` or end of input."""
        self.bind(asyncio.get_running_loop())
        self.controller.start()
        self.scheduler.start()
        reader = self._loop.create_task(self._read_commands(stdin))
        try:
            await self._stopped.wait()
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
        finally:
            reader.cancel()
            result, = await asyncio.gather(reader, return_exceptions=True)
            if isinstance(result, Exception):
                logger.error("Input reader failed", exc_info=result)
            self.stop()

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
        self.controller.detach()
        if self._stopped is not None:
            self._stopped.set()

    # --- Input ---

    async def _read_commands(self, stdin: TextIO) -> None:
        """Feed every complete input line to :meth:`handle_command`.

        The stream buffers whole chunks, so several lines arriving at once
        are all handled without waiting for more input.
        """
        try:
            reader = asyncio.StreamReader()
            transport, _ = await self._loop.connect_read_pipe(
                lambda: asyncio.StreamReaderProtocol(reader), stdin
            )
            try:
                while True:
                    line = await reader.readline()
                    if not line:
                        break
                    if not self.handle_command(line.decode(errors="replace")):
                        break
            finally:
                transport.close()
        finally:
            self.stop()

    def handle_command(self, line: str) -> bool:
        """Dispatch one command line. Returns False when the app should exit."""
        parts = line.strip().split(maxsplit=1)
        if not parts:
            return True
        verb = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""

        try:
            if verb in ("quit", "exit"):
                return False
            elif verb == "move":
                self.controller.pointer_moved(*parse_latlon(rest.split()))
            elif verb == "click":
                self.spawn(self.controller.click(*parse_latlon(rest.split())))
            elif verb == "search":
                self.spawn(self.controller.search(rest))
            elif verb == "bands":
                self.controller.toggle_bands()
            else:
                raise CommandError(f"unknown command {verb!r}")
        except CommandError as e:
            self.out.write(f"{e}. {HELP_TEXT}\n")
            self.out.flush()
        return True

    def spawn(self, coro: Coroutine) -> asyncio.Task:
        """Run a lookup without blocking input; failures are logged."""
        task = self._loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Lookup task failed", exc_info=task.exception())

    # --- Output ---

    def _on_state_change(self, section: str, value) -> None:
        # Several sections can change in one loop iteration; draw once
        if self._render_pending or self._loop is None:
            return
        self._render_pending = True
        self._loop.call_soon(self.render)

    def render(self) -> None:
        self._render_pending = False
        canvas = self.renderer.render(self.session)
        if self.color:
            frame = CLEAR_SCREEN + canvas.render()
        else:
            frame = canvas.render_plain()
        self.out.write(frame + "\n")
        self.out.flush()
        self.frames += 1


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="tzbands", description="Approximate world timezone explorer")
    p.add_argument("--config", type=Path, default=CONFIG_PATH, help="JSON config file")
    p.add_argument("--verbose", action="store_true", help="debug logging")
    p.add_argument("--no-color", action="store_true", help="plain text frames")
    p.add_argument(
        "--write-config", action="store_true", help="write the effective config to --config and exit"
    )
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the ``tzbands`` console script."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
        format="%(name)s %(levelname)s: %(message)s",
    )
    config = ExplorerConfig.load(args.config)
    if args.write_config:
        config.save(args.config)
        logger.info("Wrote config to %s", args.config)
        return
    app = ExplorerApp(config, color=not args.no_color)
    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
