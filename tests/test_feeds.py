from datetime import datetime, timedelta, timezone
from xml.etree.ElementTree import fromstring

import httpx
import pytest

from rssterm.feeds import FeedError, FeedItem, fetch_feed, load_feed_urls, parse_feed
from rssterm.utils import try_parse_html

RSS = b"""<?xml version="1.0"?>
<rss version="2.0" xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/">
<channel>
<title>Example</title>
<item>
  <title>First post</title>
  <link>https://example.com/first</link>
  <description>&lt;p&gt;Hello &lt;b&gt;world&lt;/b&gt;&lt;/p&gt;</description>
  <pubDate>Tue, 10 Jun 2025 04:00:00 GMT</pubDate>
  <author>writer@example.com</author>
  <dc:creator>Alice</dc:creator>
  <dc:creator>Bob</dc:creator>
</item>
<item>
  <title>Second</title>
  <pubDate>Wed, 11 Jun 2025 04:00:00 +0000</pubDate>
  <author>writer@example.com</author>
  <content:encoded><![CDATA[<p>Body</p>]]></content:encoded>
</item>
<item>
  <title>Undated</title>
</item>
</channel>
</rss>
"""

ATOM = b"""<?xml version="1.0"?>
<feed xmlns="http://www.w3.org/2005/Atom">
<title>Example</title>
<entry>
  <id>urn:example:1</id>
  <title>Atom one</title>
  <updated>2025-06-12T08:30:00Z</updated>
  <link rel="self" href="https://example.com/self"/>
  <link rel="alternate" href="https://example.com/one"/>
  <author><name>Carol</name></author>
  <summary>Short</summary>
  <content type="html">&lt;p&gt;Long&lt;/p&gt;</content>
</entry>
<entry>
  <id>urn:example:2</id>
  <title>Atom two</title>
  <updated>2025-06-13T08:30:00+02:00</updated>
  <link rel="related" href="https://example.com/related"/>
</entry>
<entry>
  <id>urn:example:3</id>
  <title>Atom three</title>
  <updated>2025-06-14T00:00:00Z</updated>
  <link rel="related" href="https://example.com/other"/>
  <link href="https://example.com/three"/>
</entry>
</feed>
"""


def test_rss_items_skip_undated():
    items = parse_feed(RSS)
    assert [item.title for item in items] == ["First post", "Second"]


def test_rss_dublin_core_authors_preferred():
    first, second = parse_feed(RSS)
    assert first.authors == ["Alice", "Bob"]
    assert second.authors == ["writer@example.com"]


def test_rss_fields():
    first, second = parse_feed(RSS)
    assert first.url == "https://example.com/first"
    assert first.description == try_parse_html("<p>Hello <b>world</b></p>")
    assert first.content is None
    assert second.url is None
    assert second.description is None
    assert second.content == try_parse_html("<p>Body</p>")


def test_rss_pub_date_is_aware_and_exact():
    first, _ = parse_feed(RSS)
    assert first.pub_date.tzinfo is not None
    assert first.pub_date == datetime(2025, 6, 10, 4, 0, tzinfo=timezone.utc)


def test_rss_item_without_valid_date_is_none():
    no_date = fromstring("<item><title>x</title></item>")
    bad_date = fromstring("<item><title>x</title><pubDate>yesterday</pubDate></item>")
    assert FeedItem.from_rss_item(no_date) is None
    assert FeedItem.from_rss_item(bad_date) is None


def test_atom_links():
    one, two, three = parse_feed(ATOM)
    assert one.url == "https://example.com/one"
    assert two.url == "https://example.com/related"
    assert three.url == "https://example.com/three"


def test_atom_fields():
    one, two, _ = parse_feed(ATOM)
    assert one.title == "Atom one"
    assert one.authors == ["Carol"]
    assert two.authors == []
    assert one.description == try_parse_html("Short")
    assert one.content == try_parse_html("<p>Long</p>")
    assert two.description is None
    assert two.content is None


def test_atom_dates():
    _, two, _ = parse_feed(ATOM)
    assert two.pub_date == datetime(2025, 6, 13, 8, 30, tzinfo=timezone(timedelta(hours=2)))


def test_atom_missing_updated_uses_epoch():
    entry = fromstring(
        '<entry xmlns="http://www.w3.org/2005/Atom"><id>a</id><title>t</title></entry>'
    )
    item = FeedItem.from_atom_entry(entry)
    assert item.pub_date == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_atom_bad_date_fails_the_feed():
    bad = ATOM.replace(b"2025-06-14T00:00:00Z", b"not a date")
    with pytest.raises(FeedError):
        parse_feed(bad)


def test_ids_are_stable_distinct_and_nonzero():
    first = [item.id for item in parse_feed(RSS) + parse_feed(ATOM)]
    again = [item.id for item in parse_feed(RSS) + parse_feed(ATOM)]
    assert first == again
    assert len(set(first)) == len(first)
    assert all(item_id > 0 for item_id in first)


@pytest.mark.parametrize(
    "document",
    [b"not xml at all", b"<html><body>hi</body></html>", b"<rss version='2.0'></rss>"],
)
def test_unrecognised_documents_raise(document):
    with pytest.raises(FeedError):
        parse_feed(document)


def test_load_feed_urls(tmp_path):
    path = tmp_path / "feeds.txt"
    path.write_text("\n https://a.example.com/feed\nhttps://b.example.com/rss\n\n", encoding="utf-8")
    assert load_feed_urls(path) == ["https://a.example.com/feed", "https://b.example.com/rss"]


def test_load_feed_urls_missing_or_empty(tmp_path):
    assert load_feed_urls(tmp_path / "missing.txt") == []
    empty = tmp_path / "empty.txt"
    empty.write_text("  \n", encoding="utf-8")
    assert load_feed_urls(empty) == []


@pytest.mark.asyncio
async def test_fetch_feed():
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "https://example.com/feed.xml"
        return httpx.Response(200, content=ATOM)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        items = await fetch_feed(client, "https://example.com/feed.xml")
    assert [item.title for item in items] == ["Atom one", "Atom two", "Atom three"]


@pytest.mark.asyncio
async def test_fetch_feed_garbage_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"nope"))
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(FeedError):
            await fetch_feed(client, "https://example.com/feed.xml")