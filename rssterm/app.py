"""The application: key bindings, screen layout and the main loop."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterable, AsyncIterator, Sequence
from datetime import datetime
from os import PathLike
from typing import Any

from .debug import FpsWidget
from .events import AppEvent, Close, Exit, Expand, KeyInput, Open, Scroll
from .feeds import load_feed_urls
from .stream import RateLimitedEventStream
from .utils import Throbber, format_long_timestamp
from .version import package_version
from .widgets import (
    HELP_LINES,
    HIGHLIGHT_SYMBOL,
    COLUMN_SPACING,
    SCROLLBAR_WIDTH,
    FeedView,
    StyledLine,
    column_widths,
    item_header,
)

APP_NAME = "rssterm"
SCROLL_DELAY = 0.015
_KEY_POLL = 0.05

HELP_KEYS = (
    ("j/k/↑/↓", "scroll"),
    ("g/G", "top/btm"),
    ("Enter", "expand"),
    ("o", "open"),
    ("q", "close"),
    ("Ctrl+D", "exit"),
)

_STYLES = {
    "": "",
    "title": "bold_white",
    "untitled": "bold",
    "url": "bright_black",
    "date": "italic_yellow",
    "dim": "bright_black",
    "body": "white",
    "author": "italic_bright_green",
    "heading": "bold",
    "help": "white",
    "command": "green",
    "fps": "green",
    "delta": "white",
    "delta_up": "white_on_green",
    "delta_down": "white_on_red",
    "app_name": "bold_magenta",
    "version": "blue",
    "clock": "cyan",
    "footer": "bright_black",
    "footer_key": "bold_bright_black",
    "highlight": "magenta",
    "scrollbar": "bright_black",
}

Segments = Sequence[tuple[str, str]]


def _styled(term: Any, text: str, style: str) -> str:
    attr = _STYLES.get(style, "")
    if not attr or not text:
        return text
    return getattr(term, attr)(text)


def _compose(term: Any, segments: Segments, width: int, align: str = "left") -> str:
    """Render segments into exactly ``width`` columns with the given alignment."""
    width = max(0, width)
    parts: list[str] = []
    used = 0
    for text, style in segments:
        room = width - used
        if room <= 0:
            break
        text = text[:room]
        used += len(text)
        parts.append(_styled(term, text, style))
    body = "".join(parts)
    pad = width - used
    if align == "right":
        return " " * pad + body
    if align == "center":
        left = pad // 2
        return " " * left + body + " " * (pad - left)
    return body + " " * pad


def _line(term: Any, line: StyledLine, width: int) -> str:
    return _compose(term, [(line.text, line.style)], width, line.align)


def _scrollbar(position: int, length: int, height: int) -> list[str]:
    column = [" " * SCROLLBAR_WIDTH] * height
    if height <= 0 or length <= 0:
        return column
    row = min(height - 1, round(position / length * (height - 1)))
    column[row] = " ▐"
    return column


def _key_from_keystroke(keystroke: Any) -> KeyInput | None:
    names = {"KEY_UP": "up", "KEY_DOWN": "down", "KEY_ENTER": "enter"}
    if getattr(keystroke, "is_sequence", False):
        name = names.get(keystroke.name)
        return KeyInput(name) if name else None
    text = str(keystroke)
    if not text:
        return None
    if text in ("\r", "\n"):
        return KeyInput("enter")
    if len(text) == 1 and "\x01" <= text <= "\x1a":
        return KeyInput(chr(ord(text) + 96), ctrl=True)
    return KeyInput(text, shift=text.isupper())


class App:
    """Ties the feed view, the key bindings and the screen together."""

    def __init__(
        self,
        feed: FeedView | None = None,
        key_source: AsyncIterable[KeyInput] | None = None,
    ) -> None:
        self.should_quit = False
        self.feed = feed if feed is not None else FeedView()
        self.throbber = Throbber(0.25)
        self.fps: FpsWidget | None = None
        self.version = f"v{package_version()}"
        self._key_source = key_source

    def parse_key_event(self, key: KeyInput) -> AppEvent | None:
        """Map a terminal key to an application event (the key bindings)."""
        if not key.pressed:
            return None
        name = key.key
        if name in ("up", "k"):
            return Scroll(-1)
        if name in ("down", "j"):
            return Scroll(1)
        if name == "g":
            return Scroll.to_top()
        if name == "G" and key.shift and not key.ctrl:
            return Scroll.to_bottom()
        if name == "enter":
            return Expand()
        if name == "q":
            return Close()
        if name == "o":
            return Open()
        if name == "d" and key.ctrl and not key.shift:
            return Exit()
        return None

    def handle_term_event(self, key: KeyInput) -> None:
        event = self.parse_key_event(key)
        if event is None:
            return
        if isinstance(event, Exit):
            self.should_quit = True
            return
        if isinstance(self.feed.handle_event(event), Exit):
            self.should_quit = True

    def draw(self, term: Any) -> str:
        """Render a whole frame for ``term`` and return it as text."""
        width, height = term.width, term.height
        inner_w = max(0, width - 2)
        inner_h = max(0, height - 2)
        fps_h = 1 if self.fps is not None else 0
        main_h = max(0, inner_h - 2 - 1 - 1 - 2 * fps_h)

        left_w = inner_w // 2
        right_w = inner_w - left_w
        header: list[tuple[str, str]] = [
            (APP_NAME, "app_name"),
            (" ", ""),
            (self.version, "version"),
        ]
        if self.feed.is_loading():
            header += [(" ", ""), (self.throbber.frame(), "")]
        clock = format_long_timestamp(datetime.now().astimezone())
        rows = [
            _compose(term, header, left_w) + _compose(term, [(clock, "clock")], right_w, "right"),
            " " * inner_w,
        ]
        main = self._draw_main(term, inner_w, main_h)
        rows += main + [" " * inner_w] * (main_h - len(main))
        rows.append(" " * inner_w)

        footer: list[tuple[str, str]] = []
        for position, (key, desc) in enumerate(HELP_KEYS):
            if position:
                footer.append((" | ", "footer"))
            footer += [(key, "footer_key"), (f" {desc}", "footer")]
        rows.append(_compose(term, footer, inner_w))

        if self.fps is not None:
            rows.append(" " * inner_w)
            rows.append(_compose(term, self.fps.render(), inner_w, "right"))

        blank = " " * width
        framed = [blank] + [f" {row} " for row in rows[:inner_h]]
        framed += [blank] * (height - len(framed))
        return "\n".join(framed[:height])

    def _draw_main(self, term: Any, width: int, height: int) -> list[str]:
        feed = self.feed
        if feed.show_help:
            lines = [" " * width] * (height // 3)
            lines += [_compose(term, segs, width, "center") for segs in HELP_LINES]
            return lines[:height]

        if feed.expanded.id is not None:
            item = next((i for i in feed.items if i.id == feed.expanded.id), None)
            if item is not None:
                return self._draw_expanded(term, item, width, height)

        table_w = max(0, width - SCROLLBAR_WIDTH)
        rows = feed.layout_rows(table_w)
        title_w, date_w = column_widths(table_w)
        lines: list[str] = []
        for row in feed.visible_rows(rows, height):
            selected = feed.selected is not None and feed.items[feed.selected] is row.item
            for position in range(row.height):
                prefix = HIGHLIGHT_SYMBOL if selected and position == 0 else " " * len(HIGHLIGHT_SYMBOL)
                content = row.content[position] if position < len(row.content) else StyledLine("")
                date = row.date[position] if position < len(row.date) else StyledLine("", align="right")
                lines.append(
                    _compose(term, [(prefix, "highlight")], len(HIGHLIGHT_SYMBOL))
                    + _line(term, content, title_w)
                    + " " * COLUMN_SPACING
                    + _line(term, date, date_w)
                )
            lines += [" " * (len(HIGHLIGHT_SYMBOL) + title_w + COLUMN_SPACING + date_w)] * row.bottom_margin
        lines = lines[:height]
        bar = _scrollbar(feed.scrollbar_position, feed.scrollbar_length, height)
        padded = lines + [" " * table_w] * (height - len(lines))
        return [
            _compose(term, [(line, "")], table_w) if not line.strip() else line.ljust(table_w)
            for line in padded
        ] if False else [line + _styled(term, b, "scrollbar") for line, b in zip(
            (line if line.strip() else " " * table_w for line in padded), bar)]

    def _draw_expanded(self, term: Any, item: Any, width: int, height: int) -> list[str]:
        if width < 2 or height < 2:
            return []
        inner_w = max(0, width - 2 - 4)
        inner_h = max(0, height - 2 - 2)
        header = item_header(item, inner_w)
        body: list[str] = [_line(term, line, inner_w) for line in header.title]
        body.append(" " * inner_w)

        left_w = inner_w // 2
        right_w = inner_w - left_w
        for r in range(2):
            date = header.dates[r]
            if header.authors:
                left = _compose(term, header.authors if r == 0 else [], left_w)
                right = _compose(term, [(date.text, date.style)], right_w, "right")
            else:
                left = _compose(term, [(date.text, date.style)], left_w)
                right = " " * right_w
            body.append(left + right)
        body.append(" " * inner_w)

        content_h = max(0, inner_h - len(body) - 1)
        text_w = max(0, inner_w - SCROLLBAR_WIDTH)
        view = self.feed.expanded
        view.sync_content(item, text_w, content_h)
        visible = view.visible_lines()
        bar = _scrollbar(view.scrollbar_position, view.scrollbar_length, content_h)
        for r in range(content_h):
            text = _line(term, visible[r], text_w) if r < len(visible) else " " * text_w
            body.append(text + _styled(term, bar[r], "scrollbar"))
        body = body[:inner_h]
        body += [" " * inner_w] * (inner_h - len(body))

        border = lambda s: _styled(term, s, "scrollbar")  # noqa: E731
        lines = [border("╭" + "─" * (width - 2) + "╮"), border("│") + " " * (width - 2) + border("│")]
        lines += [border("│") + "  " + row + "  " + border("│") for row in body]
        lines += [border("│") + " " * (width - 2) + border("│"), border("╰" + "─" * (width - 2) + "╯")]
        return lines[:height]

    async def _terminal_keys(self, term: Any) -> AsyncIterator[KeyInput]:
        loop = asyncio.get_running_loop()
        while True:
            keystroke = await loop.run_in_executor(None, term.inkey, _KEY_POLL)
            key = _key_from_keystroke(keystroke)
            if key is not None:
                yield key

    async def run(
        self,
        term: Any,
        feeds_file: str | PathLike[str],
        tick_rate: float,
        show_fps: bool = False,
    ) -> None:
        """Load the feeds and process keys and redraws until asked to quit."""
        if show_fps:
            self.fps = FpsWidget()
        self.feed.load(load_feed_urls(feeds_file))

        source = self._key_source if self._key_source is not None else self._terminal_keys(term)
        keys = RateLimitedEventStream(source, SCROLL_DELAY)
        pending: asyncio.Task[Any] | None = None
        next_tick = time.monotonic()
        try:
            while not self.should_quit:
                if pending is None:
                    pending = asyncio.ensure_future(anext(keys))
                timeout = max(0.0, next_tick - time.monotonic())
                done, _ = await asyncio.wait({pending}, timeout=timeout)
                if done:
                    task, pending = pending, None
                    try:
                        self.handle_term_event(task.result())
                    except StopAsyncIteration:
                        self.should_quit = True
                    continue
                frame = self.draw(term)
                term.stream.write(term.home + frame)
                term.stream.flush()
                next_tick = time.monotonic() + tick_rate
        finally:
            if pending is not None:
                pending.cancel()