"""A terminal reader for RSS and Atom feeds."""

__version__ = "0.1.0"