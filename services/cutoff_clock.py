"""
Live cutoff countdown.

One CutoffClock per displayed widget: it recomputes the cutoff display
on a fixed interval and immediately when the watched location or
division changes. The background task must be stopped when the widget
goes away; use `async with` or call stop().
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional
import structlog

from config import settings
from models.cutoff_rules import CutoffDisplay, Division
from services.cutoff_service import CutoffService, get_cutoff_service
from utils.time_utils import now_utc

logger = structlog.get_logger(__name__)


class CutoffClock:
    """
    Repeating cutoff display refresher.

    Usage:
        async with CutoffClock("loc-1", Division.METALS, on_update=render) as clock:
            ...
            clock.watch("loc-2", Division.PLASTICS)
    """

    def __init__(
        self,
        location_id: str,
        division: Division,
        on_update: Optional[Callable[[CutoffDisplay], None]] = None,
        cutoff_service: Optional[CutoffService] = None,
        interval_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = now_utc
    ):
        self.location_id = location_id
        self.division = division
        self.on_update = on_update
        self.cutoff_service = cutoff_service or get_cutoff_service()
        self.interval_seconds = interval_seconds or settings.cutoff_refresh_seconds
        self.clock = clock
        self.latest: Optional[CutoffDisplay] = None
        self.refresh_count = 0
        self._task: Optional[asyncio.Task] = None
        self._wake = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh(self) -> CutoffDisplay:
        """Recompute the display now and publish it."""
        display = await asyncio.to_thread(
            self.cutoff_service.get_display,
            self.location_id,
            self.division,
            self.clock(),
        )
        self.latest = display
        self.refresh_count += 1
        if self.on_update is not None:
            self.on_update(display)
        return display

    def watch(self, location_id: str, division: Division) -> None:
        """Switch the watched location/division and recompute right away."""
        if (location_id, division) == (self.location_id, self.division):
            return
        self.location_id = location_id
        self.division = division
        self._wake.set()

    def start(self) -> None:
        """Start the refresh loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug(
            "cutoff_clock_started",
            location_id=self.location_id,
            division=self.division.value,
            interval=self.interval_seconds
        )

    async def stop(self) -> None:
        """Cancel the refresh loop and wait for it to finish."""
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Only the loop's own cancellation is expected here
            current = asyncio.current_task()
            if not task.cancelled() or (current is not None and current.cancelling()):
                raise
        logger.debug("cutoff_clock_stopped", location_id=self.location_id, refreshes=self.refresh_count)

    async def _run(self) -> None:
        while True:
            self._wake.clear()
            try:
                await self.refresh()
            except Exception as e:
                logger.error(
                    "cutoff_clock_refresh_failed",
                    location_id=self.location_id,
                    error=str(e),
                    error_type=type(e).__name__
                )
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

    async def __aenter__(self) -> "CutoffClock":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.stop()
        return False
