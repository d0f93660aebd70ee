"""Text helpers shared by the views: wrapping, HTML flattening, the throbber."""

from __future__ import annotations

import re
import textwrap
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TypeVar

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

T = TypeVar("T")

LONG_TIMESTAMP_FMT = "%H:%M:%S / %-e-%b-%Y [%a]"
WARM_WHITE_RGB = (232, 233, 240)

CANADIAN = ("ᔐ", "ᯇ", "ᔑ", "ᯇ")

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def format_long_timestamp(moment: datetime) -> str:
    """Format a time as ``HH:MM:SS / D-Mon-YYYY [Day]`` independent of locale."""
    return (
        f"{moment:%H:%M:%S} / {moment.day}-{_MONTHS[moment.month - 1]}-{moment.year}"
        f" [{_WEEKDAYS[moment.weekday()]}]"
    )


def wrap_then_apply(text: str, width: int, apply: Callable[[str], T]) -> list[T]:
    """Wrap ``text`` to ``width`` columns, breaking long words, and map each line."""
    width = max(1, width)
    wrapped: list[str] = []
    for line in text.split("\n"):
        pieces = textwrap.wrap(line, width=width, break_long_words=True)
        wrapped.extend(pieces or [""])
    return [apply(line) for line in wrapped]


_PARAGRAPH = "\x00"
_HARD_SPACE = "\x01"

_SKIPPED_TAGS = frozenset({"script", "style", "head", "title", "template", "noscript"})
_BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
        "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5",
        "h6", "header", "main", "nav", "ol", "p", "pre", "section", "table",
        "tr", "ul",
    }
)
_IGNORED_STRINGS = (Comment, Declaration, Doctype, CData, ProcessingInstruction)


def _render_node(node: Tag, out: list[str], links: list[str], pre: bool) -> None:
    for child in node.children:
        if isinstance(child, _IGNORED_STRINGS):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if pre:
                text = text.replace(" ", _HARD_SPACE).replace("\t", _HARD_SPACE * 4)
            else:
                text = re.sub(r"\s+", " ", text)
            out.append(text)
            continue
        if not isinstance(child, Tag):
            continue

        name = child.name
        if name in _SKIPPED_TAGS:
            continue
        if name == "br":
            out.append("\n")
            continue
        if name == "hr":
            out.append(_PARAGRAPH)
            continue
        if name == "img":
            alt = child.get("alt")
            if alt:
                out.append(str(alt))
            continue

        if name == "li":
            parent = child.parent
            if parent is not None and parent.name == "ol":
                number = sum(1 for sibling in child.find_previous_siblings("li")) + 1
                out.append(f"\n{number}. ")
            else:
                out.append("\n* ")
        elif name in ("td", "th"):
            out.append(" ")

        block = name in _BLOCK_TAGS
        if block:
            out.append(_PARAGRAPH)
        _render_node(child, out, links, pre or name == "pre")
        if block:
            out.append(_PARAGRAPH)

        if name == "a":
            href = child.get("href")
            if href:
                links.append(str(href))
                out.append(f"[{len(links)}]")


def _html_to_lines(html: str) -> list[str]:
    soup = BeautifulSoup(html, "html.parser")
    out: list[str] = []
    links: list[str] = []
    _render_node(soup, out, links, pre=False)

    blocks: list[str] = []
    for segment in "".join(out).split(_PARAGRAPH):
        lines = [line.strip(" ") for line in segment.split("\n")]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        if lines:
            blocks.append("\n".join(lines))

    text = "\n\n".join(blocks).replace(_HARD_SPACE, " ")
    result = text.splitlines()
    if links:
        if result:
            result.append("")
        result.extend(f"[{number}]: {href}" for number, href in enumerate(links, start=1))
    return result


def try_parse_html(html: str) -> list[str]:
    """Flatten HTML into plain text lines, with links listed as footnotes.

    Falls back to the raw input as a single line when it cannot be parsed.
    """
    try:
        return _html_to_lines(html)
    except Exception:
        return [html]


class Throbber:
    """A spinner that advances one frame per ``interval`` seconds."""

    def __init__(
        self,
        interval: float,
        symbols: Sequence[str] = CANADIAN,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not symbols:
            raise ValueError("a throbber needs at least one symbol")
        self.interval = interval
        self.symbols = tuple(symbols)
        self._clock = clock
        self._index = 0
        self._last_instant = clock()

    def frame(self) -> str:
        """Return the symbol to show now, advancing when the interval has passed."""
        now = self._clock()
        if now - self._last_instant >= self.interval:
            self._index = (self._index + 1) % len(self.symbols)
            self._last_instant = now
        return self.symbols[self._index]