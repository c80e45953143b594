"""Utility functions for Finder."""

from finder.utils.text import decode_text, fold, is_binary_content

__all__ = ["decode_text", "fold", "is_binary_content"]
