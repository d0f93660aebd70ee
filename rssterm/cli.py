"""Command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from .version import package_version

F32_EPSILON = 1.1920929e-07


def default_feeds_file() -> Path:
    """``~/.config/rssterm/feeds.txt``, or ``feeds.txt`` without a home directory."""
    try:
        return Path.home() / ".config/rssterm/feeds.txt"
    except RuntimeError:
        return Path("feeds.txt")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rssterm", description="i read rss feeds on the terminal btw"
    )
    parser.add_argument("--version", action="version", version=package_version())
    parser.add_argument(
        "--feeds",
        dest="feeds_file",
        type=Path,
        default=Path(os.environ.get("RSSTERM_FEEDS") or default_feeds_file()),
    )
    parser.add_argument(
        "--fps", type=float, default=120.0, help="Target rendering FPS (use 0 for uncapped)"
    )
    parser.add_argument("--show-fps", action="store_true", default=False)
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("feeds", help="print the path of the feeds file")
    return parser


def tick_rate_from_fps(fps: float) -> float:
    """Seconds between frames for a target ``fps``; 0 means as fast as possible."""
    if fps == 0.0:
        return F32_EPSILON
    if fps < 0:
        raise ValueError("fps must not be negative")
    return 1.0 / fps


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "feeds":
        print(args.feeds_file)
        return 0

    tick_rate = tick_rate_from_fps(args.fps)

    from blessed import Terminal

    from .app import App

    term = Terminal()
    with term.fullscreen(), term.cbreak(), term.hidden_cursor():
        asyncio.run(App().run(term, args.feeds_file, tick_rate, args.show_fps))
    return 0


if __name__ == "__main__":
    sys.exit(main())