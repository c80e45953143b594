"""Finder - fuzzy search a folder of notes and chat with an assistant that cites them."""

__version__ = "0.1.0"
