"""Time conductor: current bounds, time system and follow mode."""

from __future__ import annotations

import logging
from typing import Optional

from telemetry_table.core.events import EventEmitter
from telemetry_table.core.types import TimeBounds, TimeSystem

logger = logging.getLogger(__name__)


class TimeConductor(EventEmitter):
    """
    In-process `TimeAuthority`.

    Emits ``"bounds"`` (TimeBounds), ``"timeSystem"`` (TimeSystem) and
    ``"follow"`` (bool) whenever the corresponding value changes.
    """

    def __init__(
        self,
        bounds: TimeBounds,
        time_system: Optional[TimeSystem] = None,
        *,
        follow: bool = False,
    ) -> None:
        super().__init__()
        if bounds.start > bounds.end:
            raise ValueError(f"bounds start {bounds.start} is after end {bounds.end}")
        self._bounds = bounds
        self._time_system = time_system
        self._follow = follow

    def bounds(self) -> TimeBounds:
        return self._bounds

    def time_system(self) -> Optional[TimeSystem]:
        return self._time_system

    def follow(self) -> bool:
        return self._follow

    def set_bounds(self, bounds: TimeBounds) -> None:
        if bounds.start > bounds.end:
            raise ValueError(f"bounds start {bounds.start} is after end {bounds.end}")
        self._bounds = bounds
        self.emit("bounds", bounds)

    def set_time_system(self, time_system: TimeSystem, bounds: Optional[TimeBounds] = None) -> None:
        self._time_system = time_system
        logger.debug("Time system -> %s", time_system.key)
        self.emit("timeSystem", time_system)
        if bounds is not None:
            self.set_bounds(bounds)

    def set_follow(self, follow: bool) -> None:
        if follow == self._follow:
            return
        self._follow = follow
        self.emit("follow", follow)

    def advance(self, delta: float) -> None:
        """Slide the window forward by *delta* (real-time mode)."""
        self.set_bounds(TimeBounds(self._bounds.start + delta, self._bounds.end + delta))
