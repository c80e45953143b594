"""Text decoding and case folding helpers."""

from typing import Optional

# Printable ASCII plus tab, LF, CR
_TEXT_BYTES = frozenset(range(32, 127)) | {9, 10, 13}


def is_binary_content(content: bytes, sample_size: int = 8192) -> bool:
    """Detect if content is binary by checking for null bytes and non-text chars.

    Args:
        content: Raw file content
        sample_size: Number of bytes to sample from the start

    Returns:
        True if content appears to be binary
    """
    if not content:
        return False

    sample = content[:sample_size]

    # Null bytes are a strong binary indicator
    if b"\x00" in sample:
        return True

    # UTF-8 text is never binary, whatever its share of non-ASCII bytes
    try:
        sample.decode("utf-8")
        return False
    except UnicodeDecodeError as exc:
        # A multi-byte sequence cut by the sample boundary is still text
        if exc.start >= len(sample) - 3 and len(content) > sample_size:
            return False

    non_text = sum(1 for byte in sample if byte not in _TEXT_BYTES)
    return (non_text / len(sample)) > 0.30


def decode_text(content: bytes) -> Optional[str]:
    """Decode raw file content, or return None for binary content."""
    if is_binary_content(content):
        return None
    return content.decode("utf-8", errors="replace")


def fold(text: str) -> str:
    """Casefold ``text`` one character at a time.

    Folding per character keeps a one-to-one mapping, so match positions
    index the original text, and sigma folds the same in every position.
    Characters whose folded form has a different length (e.g. "ß") are
    left as they are.
    """
    return "".join(_fold_char(ch) for ch in text)


def _fold_char(ch: str) -> str:
    folded = ch.casefold()
    return folded if len(folded) == 1 else ch
