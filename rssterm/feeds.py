"""Feed items, and fetching and parsing RSS and Atom feeds."""

from __future__ import annotations

import hashlib
from collections.abc import Collection, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from os import PathLike
from pathlib import Path
from xml.etree.ElementTree import Element, ParseError

import defusedxml.ElementTree as SafeET
import httpx

from .utils import try_parse_html

ATOM_NS = "http://www.w3.org/2005/Atom"
DC_NS = "http://purl.org/dc/elements/1.1/"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"

_ATOM = ("", ATOM_NS)
_RSS = ("",)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class FeedError(Exception):
    """A document could not be read as an RSS or Atom feed."""


def _split_tag(tag: str) -> tuple[str, str]:
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return namespace, local
    return "", tag


def _children(
    elem: Element, name: str, namespaces: Collection[str] | None = None
) -> Iterator[Element]:
    for child in elem:
        if not isinstance(child.tag, str):
            continue
        namespace, local = _split_tag(child.tag)
        if local == name and (namespaces is None or namespace in namespaces):
            yield child


def _child(
    elem: Element, name: str, namespaces: Collection[str] | None = None
) -> Element | None:
    return next(_children(elem, name, namespaces), None)


def _text(elem: Element | None) -> str | None:
    if elem is None:
        return None
    return "".join(elem.itertext()).strip()


def _item_id(*parts: object) -> int:
    digest = hashlib.blake2b(repr(parts).encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "big") or 1


def _parse_rfc3339(text: str) -> datetime:
    try:
        moment = datetime.fromisoformat(text)
    except ValueError as exc:
        raise FeedError(f"invalid date: {text!r}") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


@dataclass
class FeedItem:
    """One entry of a feed, ready to be listed and shown."""

    id: int
    pub_date: datetime
    title: str | None = None
    url: str | None = None
    authors: list[str] = field(default_factory=list)
    description: list[str] | None = None
    content: list[str] | None = None

    @classmethod
    def from_atom_entry(cls, entry: Element) -> FeedItem:
        """Build an item from an Atom ``<entry>`` element."""
        links = [
            (link.get("rel", "alternate"), link.get("href", ""))
            for link in _children(entry, "link", _ATOM)
        ]
        url = next((href for rel, href in links if rel == "alternate"), None)
        if url is None and links:
            url = links[0][1]

        entry_id = _text(_child(entry, "id", _ATOM)) or ""
        title = _text(_child(entry, "title", _ATOM)) or ""
        updated_text = _text(_child(entry, "updated", _ATOM))
        updated = _parse_rfc3339(updated_text) if updated_text else _EPOCH

        summary = _child(entry, "summary", _ATOM)
        description = None if summary is None else try_parse_html(_text(summary) or "")

        content = None
        content_elem = _child(entry, "content", _ATOM)
        if content_elem is not None:
            value = _text(content_elem) or ""
            if value or content_elem.get("src") is None:
                content = try_parse_html(value)

        authors = [
            _text(_child(author, "name", _ATOM)) or ""
            for author in _children(entry, "author", _ATOM)
        ]

        return cls(
            id=_item_id(entry_id, title, updated.isoformat()),
            title=title,
            url=url,
            authors=authors,
            description=description,
            content=content,
            pub_date=updated.astimezone(),
        )

    @classmethod
    def from_rss_item(cls, item: Element) -> FeedItem | None:
        """Build an item from an RSS ``<item>``; ``None`` without a valid pubDate."""
        authors = [text for text in map(_text, _children(item, "creator", (DC_NS,))) if text is not None]
        # Dublin Core creators are preferred over the plain RSS author.
        if not authors:
            author = _text(_child(item, "author", _RSS))
            if author is not None:
                authors.append(author)

        title = _text(_child(item, "title", _RSS))
        description = _text(_child(item, "description", _RSS))
        pub_date_text = _text(_child(item, "pubDate", _RSS))
        if pub_date_text is None:
            return None
        try:
            pub_date = parsedate_to_datetime(pub_date_text)
        except (TypeError, ValueError):
            return None
        if pub_date.tzinfo is None:
            pub_date = pub_date.replace(tzinfo=timezone.utc)

        content = _text(_child(item, "encoded", (CONTENT_NS,)))

        return cls(
            id=_item_id(title, description, pub_date_text),
            title=title,
            url=_text(_child(item, "link", _RSS)),
            pub_date=pub_date.astimezone(),
            description=None if description is None else try_parse_html(description),
            content=None if content is None else try_parse_html(content),
            authors=authors,
        )


def parse_feed(data: bytes | str) -> list[FeedItem]:
    """Parse an RSS or Atom document into its items, in document order."""
    try:
        root = SafeET.fromstring(data)
    except (ParseError, ValueError) as exc:
        raise FeedError("Failed to parse feed") from exc

    _, name = _split_tag(root.tag)
    if name == "rss":
        channel = _child(root, "channel", _RSS)
        if channel is None:
            raise FeedError("Failed to parse feed")
        parsed = (FeedItem.from_rss_item(item) for item in _children(channel, "item", _RSS))
        return [item for item in parsed if item is not None]
    if name == "feed":
        return [FeedItem.from_atom_entry(entry) for entry in _children(root, "entry", _ATOM)]
    raise FeedError("Failed to parse feed")


async def fetch_feed(client: httpx.AsyncClient, url: str) -> list[FeedItem]:
    """Download the feed at ``url`` and parse its items."""
    response = await client.get(url, follow_redirects=True)
    return parse_feed(response.content)


def load_feed_urls(path: str | PathLike[str]) -> list[str]:
    """Read feed URLs, one per line; an unreadable file gives no URLs."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []
    return text.strip().splitlines()