"""State and layout of the feed list and of the expanded item view."""

from __future__ import annotations

import asyncio
import sys
import webbrowser
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
import humanize

from .events import AppEvent, Close, Exit, Expand, Open, Scroll
from .feeds import FeedItem, fetch_feed
from .utils import format_long_timestamp, wrap_then_apply
from .version import package_version

STYLE_PLAIN = ""
STYLE_TITLE = "title"
STYLE_UNTITLED = "untitled"
STYLE_URL = "url"
STYLE_DATE = "date"
STYLE_DIM = "dim"
STYLE_BODY = "body"
STYLE_AUTHOR = "author"
STYLE_HEADING = "heading"
STYLE_HELP = "help"
STYLE_COMMAND = "command"

HIGHLIGHT_SYMBOL = ">> "
COLUMN_SPACING = 2
DATE_COLUMN_PERCENT = 20
SCROLLBAR_WIDTH = 2

HELP_LINES: tuple[tuple[tuple[str, str], ...], ...] = (
    (("NO FEEDS FOUND", STYLE_HEADING),),
    (),
    (("Add RSS/Atom URLs to the feeds file to get started", STYLE_HELP),),
    (),
    (
        ("$ ", STYLE_DIM),
        ("echo 'https://hnrss.org/frontpage' >> $(rssterm feeds)", STYLE_COMMAND),
    ),
)


@dataclass(frozen=True)
class StyledLine:
    """A line of text with a style name and an alignment."""

    text: str
    style: str = STYLE_PLAIN
    align: str = "left"


@dataclass(frozen=True)
class FeedRow:
    """One laid-out row of the feed table."""

    item: FeedItem
    content: list[StyledLine]
    date: list[StyledLine]
    height: int
    bottom_margin: int

    @property
    def total_height(self) -> int:
        return self.height + self.bottom_margin


@dataclass(frozen=True)
class ItemHeader:
    """Title, author segments and date lines shown above an expanded item."""

    title: list[StyledLine]
    authors: list[tuple[str, str]]
    dates: list[StyledLine]


def user_agent() -> str:
    return f"rssterm/{package_version()}"


def human_time(moment: datetime, now: datetime | None = None) -> str:
    """Describe ``moment`` relative to ``now``, such as "2 hours ago"."""
    if now is None:
        now = datetime.now(timezone.utc)
    return humanize.naturaltime(now - moment)


def column_widths(width: int) -> tuple[int, int]:
    """Widths of the title and date columns in a table ``width`` columns wide."""
    inner = max(0, width - len(HIGHLIGHT_SYMBOL))
    date_width = inner * DATE_COLUMN_PERCENT // 100
    title_width = max(0, inner - COLUMN_SPACING - date_width)
    return title_width, date_width


def feed_row(
    item: FeedItem,
    title_width: int,
    date_width: int,
    bottom_margin: int = 0,
    now: datetime | None = None,
) -> FeedRow:
    """Lay out the title, link and date of ``item`` in the given column widths."""
    if item.title is not None:
        content = wrap_then_apply(item.title, title_width, lambda line: StyledLine(line, STYLE_TITLE))
    else:
        content = wrap_then_apply("untitled", title_width, lambda line: StyledLine(line, STYLE_UNTITLED))
    if item.url is not None:
        content.append(StyledLine(item.url, STYLE_URL))

    date = wrap_then_apply(
        human_time(item.pub_date, now),
        date_width,
        lambda line: StyledLine(line, STYLE_DATE, "right"),
    )
    height = max(len(content), len(date))
    return FeedRow(item, content, date, height, bottom_margin)


def item_header(item: FeedItem, width: int, now: datetime | None = None) -> ItemHeader:
    """Build the header shown above the body of an expanded item."""
    if item.title is not None:
        title = wrap_then_apply(item.title, width, lambda line: StyledLine(line, STYLE_TITLE))
    else:
        title = [StyledLine("untitled", STYLE_UNTITLED)]

    authors: list[tuple[str, str]] = []
    if item.authors:
        authors.append(("by ", STYLE_DIM))
        for position, author in enumerate(item.authors):
            if position:
                authors.append((", ", STYLE_DIM))
            authors.append((author, STYLE_AUTHOR))

    dates = [
        StyledLine(human_time(item.pub_date, now), STYLE_DATE),
        StyledLine(format_long_timestamp(item.pub_date), STYLE_DIM),
    ]
    return ItemHeader(title, authors, dates)


@dataclass
class ExpandedItemView:
    """The scrollable full view of a single feed item."""

    id: int | None = None
    content: list[StyledLine] | None = None
    width: int | None = None
    height: int | None = None
    scroll_offset: int = 0
    scrollbar_position: int = 0
    scrollbar_length: int = 0

    def max_scroll_offset(self) -> int:
        return max(0, len(self.content or ()) - (self.height or 0))

    def scroll(self, delta: int) -> None:
        if delta == Scroll.TOP:
            self.scroll_offset = 0
        elif delta == Scroll.BOTTOM:
            self.scroll_offset = self.max_scroll_offset()
        elif delta < 0:
            self.scroll_offset = max(0, self.scroll_offset + delta)
        else:
            self.scroll_offset = min(self.scroll_offset + delta, self.max_scroll_offset())
        self.scrollbar_position = self.scroll_offset

    def sync_content(self, item: FeedItem, width: int, height: int) -> list[StyledLine]:
        """Show ``item`` in a ``width`` by ``height`` area, rewrapping when needed."""
        if self.width != width or self.id != item.id:
            source = item.content if item.content is not None else item.description
            if source is None:
                self.content = None
            else:
                self.content = [
                    StyledLine(piece, STYLE_BODY)
                    for line in source
                    for piece in wrap_then_apply(line, width, str)
                ]

        self.id = item.id
        self.width = width
        self.height = height

        self.scroll_offset = min(self.scroll_offset, self.max_scroll_offset())
        self.scrollbar_position = self.scroll_offset
        lines = list(self.content or ())
        self.scrollbar_length = max(0, len(lines) - height)
        return lines

    def visible_lines(self) -> list[StyledLine]:
        lines = self.content or []
        return lines[self.scroll_offset : self.scroll_offset + (self.height or 0)]


class FeedView:
    """The list of items from all feeds, newest first, with a selection."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        opener: Callable[[str], bool] = webbrowser.open,
    ) -> None:
        self._client = client
        self._opener = opener
        self._task: asyncio.Task[None] | None = None
        self.show_help = False
        self.items: list[FeedItem] = []
        self.loading_count = 0
        self.selected: int | None = None
        self.offset = 0
        self.cum_row_heights: list[int] = []
        self.scrollbar_position = 0
        self.scrollbar_length = 0
        self.expanded = ExpandedItemView()

    def load(self, urls: Iterable[str]) -> asyncio.Task[None] | None:
        """Start fetching ``urls`` in the background; show help if there are none."""
        urls = list(urls)
        if not urls:
            self.show_help = True
            return None
        self.loading_count = len(urls)
        self._task = asyncio.get_running_loop().create_task(self._fetch_all(urls))
        return self._task

    async def _fetch_all(self, urls: list[str]) -> None:
        client = self._client
        owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(headers={"User-Agent": user_agent()})
        try:
            tasks = [asyncio.create_task(fetch_feed(client, url)) for url in urls]
            for finished in asyncio.as_completed(tasks):
                try:
                    items = await finished
                except Exception as exc:  # any failed feed is reported and skipped
                    print(f"Feed fetch error: {exc}", file=sys.stderr)
                else:
                    self.add_items(items)
                self.loading_count = max(0, self.loading_count - 1)
        finally:
            if owns_client:
                await client.aclose()

    def is_loading(self) -> bool:
        return self.loading_count > 0

    def add_items(self, items: Iterable[FeedItem]) -> None:
        self.items.extend(items)
        self.items.sort(key=lambda item: item.pub_date, reverse=True)

    def handle_event(self, event: AppEvent) -> AppEvent | None:
        """Apply ``event``; returns an event for the application, if any."""
        match event:
            case Scroll(delta):
                if self.expanded.id is not None:
                    self.expanded.scroll(delta)
                else:
                    self.scroll_feed(delta)
            case Expand():
                if self.selected is not None and 0 <= self.selected < len(self.items):
                    self.expanded.id = self.items[self.selected].id
            case Close():
                if self.expanded.id is not None:
                    self.expanded = ExpandedItemView()
                else:
                    return Exit()
            case Open():
                self.open_selected()
        return None

    def scroll_feed(self, delta: int) -> None:
        count = len(self.items)
        current = self.selected or 0
        if delta == Scroll.TOP:
            target = 0
        elif delta == Scroll.BOTTOM:
            target = count - 1
        elif delta < 0:
            target = max(0, current + delta)
        else:
            target = current + delta
        self.selected = min(max(0, target), count - 1) if count else None

        heights = self.cum_row_heights
        index = min(self.selected or 0, max(0, len(heights) - 1))
        # The first row keeps the scrollbar at the top.
        self.scrollbar_position = heights[index - 1] if index > 0 and heights else 0

    def open_selected(self) -> str | None:
        """Open the selected item's link; returns the URL that was opened."""
        url = None
        if self.selected is not None and 0 <= self.selected < len(self.items):
            url = self.items[self.selected].url
        if url is None:
            print("No item selected or no URL available", file=sys.stderr)
            return None
        try:
            opened = self._opener(url)
        except (webbrowser.Error, OSError) as exc:
            print(f"Failed to open URL: {exc}", file=sys.stderr)
            return None
        if opened is False:
            print(f"Failed to open URL: {url}", file=sys.stderr)
            return None
        return url

    def layout_rows(self, width: int) -> list[FeedRow]:
        """Lay out every item for a table ``width`` columns wide."""
        title_width, date_width = column_widths(width)
        now = datetime.now(timezone.utc)
        last = len(self.items) - 1
        rows: list[FeedRow] = []
        heights: list[int] = []
        total = 0
        for index, item in enumerate(self.items):
            row = feed_row(item, title_width, date_width, 0 if index == last else 1, now)
            total += row.total_height
            heights.append(total)
            rows.append(row)
        self.cum_row_heights = heights
        self.scrollbar_length = total

        expanded_index = None
        if self.expanded.id is not None:
            expanded_index = next(
                (i for i, item in enumerate(self.items) if item.id == self.expanded.id), None
            )
        if expanded_index is not None:
            self.selected = expanded_index
        elif self.selected is None and self.items:
            self.selected = 0
        if not self.items:
            self.selected = None
        elif self.selected is not None:
            self.selected = min(self.selected, last)
        return rows

    def visible_rows(self, rows: list[FeedRow], height: int) -> list[FeedRow]:
        """The rows that fit in ``height`` lines while keeping the selection visible."""
        if not rows:
            self.offset = 0
            return []
        start = end = min(self.offset, len(rows) - 1)
        used = 0
        for row in rows[start:]:
            if used + row.height > height:
                break
            used += row.total_height
            end += 1

        selected = min(self.selected or 0, len(rows) - 1)
        while selected >= end:
            used += rows[end].total_height
            end += 1
            while used > height and start < selected:
                used -= rows[start].total_height
                start += 1
        while selected < start:
            start -= 1
            used += rows[start].total_height
            while used > height and end > start + 1:
                end -= 1
                used -= rows[end].total_height

        self.offset = start
        return rows[start:end]