"""A frames-per-second readout for performance debugging."""

from __future__ import annotations

import time
from collections.abc import Callable

STYLE_FPS = "fps"
STYLE_PLAIN = ""
STYLE_DELTA = "delta"
STYLE_DELTA_UP = "delta_up"
STYLE_DELTA_DOWN = "delta_down"

_MEASURE_WINDOW = 1.0
_NO_CHANGE_PERCENT = 2.0


class FpsWidget:
    """Counts rendered frames and reports the rate about once per second."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._frame_count = 0
        self._last_instant = clock()
        self.curr_fps: float | None = None
        self.prev_fps: float | None = None

    def render(self) -> list[tuple[str, str]]:
        """Count one frame and return the readout as ``(text, style)`` segments.

        The list is empty until the first measurement is available.
        """
        self._frame_count += 1

        now = self._clock()
        elapsed = now - self._last_instant
        if elapsed > _MEASURE_WINDOW and self._frame_count > 2:
            self.prev_fps = self.curr_fps
            self.curr_fps = self._frame_count / elapsed
            self._frame_count = 0
            self._last_instant = now

        if self.curr_fps is None:
            return []

        curr = self.curr_fps
        segments = [(f"{curr:.2f} fps", STYLE_FPS)]

        prev = self.prev_fps
        if prev is not None:
            if prev == 0.0:
                delta = 100.0
            else:
                delta = abs((curr - prev) / prev * 100.0)
            rising = prev < curr
            symbol = "▲" if rising else "▼"
            if delta < _NO_CHANGE_PERCENT:
                style = STYLE_DELTA
            elif rising:
                style = STYLE_DELTA_UP
            else:
                style = STYLE_DELTA_DOWN
            segments.append((" ", STYLE_PLAIN))
            segments.append((f" {symbol} {delta:.2f}% ", style))

        return segments