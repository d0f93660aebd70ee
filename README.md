# rssterm

Read RSS and Atom feeds in the terminal.

rssterm fetches every feed listed in a plain-text feeds file, merges the items
into one list sorted newest first, and lets you browse them from the keyboard.
Expanding an item shows its full content (or its description when it has no
content), flattened from HTML to plain text with links listed as numbered
footnotes, together with its authors and publication date.

## Installation

```
pip install .
```

## Getting started

Find out where rssterm looks for its feeds file:

```
rssterm feeds
```

The default is `~/.config/rssterm/feeds.txt`; if no home directory can be
determined, `feeds.txt` in the current directory is used. Add one RSS or Atom
URL per line, for example:

```
echo 'https://hnrss.org/frontpage' >> $(rssterm feeds)
```

Then start the reader:

```
rssterm
```

If the feeds file is missing, unreadable or empty, a short help screen is shown
in place of the list. While feeds are still downloading, a spinner is shown next
to the title. A feed that cannot be fetched or parsed is reported on standard
error and skipped.

## Options

| Option | Description |
| --- | --- |
| `--feeds PATH` | Path to the feeds file. Its default can also be set with the `RSSTERM_FEEDS` environment variable. |
| `--fps N` | Target rendering rate, 120 by default. Use `0` for no cap; negative values are rejected. |
| `--show-fps` | Show the measured frame rate, and its change since the last measurement, in the bottom corner. |
| `--version` | Print the version and exit. Inside a jj or git checkout the short commit id is appended, as in `0.1.0+abc123`. |

## Keys

| Key | Action |
| --- | --- |
| `j` / `k` / `↓` / `↑` | scroll down / up |
| `g` / `G` | jump to top / bottom |
| `Enter` | expand the selected item |
| `o` | open the selected item's link with the default web browser |
| `q` | close the expanded item, or quit from the list |
| `Ctrl+D` | quit |

Arrow-key scrolling is rate-limited to one step every 15 ms; of the presses that
arrive in between, only the most recent is kept and applied when the delay ends.

## Using the parts as a library

- `rssterm.feeds.parse_feed(data)` parses an RSS or Atom document into a list of
  `FeedItem`s and raises `rssterm.feeds.FeedError` for anything else. RSS items
  without a valid `pubDate` are left out.
- `rssterm.feeds.fetch_feed(client, url)` downloads and parses a feed with an
  `httpx.AsyncClient`.
- `rssterm.feeds.load_feed_urls(path)` reads the feeds file.
- `rssterm.utils.try_parse_html(html)` flattens HTML into plain text lines, and
  `rssterm.utils.wrap_then_apply(text, width, apply)` wraps text and maps each
  line.

## Limitations

- Feeds are fetched once, when the reader starts; there is no refresh.
- Nothing is stored between runs: there is no read/unread state, cache or
  bookmark list.
- Only keyboard input is read; mouse wheel events are not handled.
- Feeds are added by editing the feeds file; there is no command for it.

## Development

```
pip install -e '.[test]'
pytest
```