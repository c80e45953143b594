"""Settings read from the environment and ``.env`` files."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from finder.chat.transport import (
    DEFAULT_API_URL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
)
from finder.ingesters import DEFAULT_EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "nvim"


def load_env_files(cwd: Optional[Path] = None, home: Optional[Path] = None) -> None:
    """Load ``.env`` from the working directory, then from the home directory.

    Variables already set in the environment are never overridden.
    """
    for folder in (cwd or Path.cwd(), home or Path.home()):
        env_file = folder / ".env"
        if env_file.is_file():
            logger.debug(f"Loading {env_file}")
            load_dotenv(env_file, override=False)


def _parse_extensions(raw: Optional[str]) -> frozenset[str]:
    if not raw:
        return DEFAULT_EXTENSIONS
    exts = {e.strip().lower() for e in raw.split(",") if e.strip()}
    return frozenset(e if e.startswith(".") else f".{e}" for e in exts) or DEFAULT_EXTENSIONS


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    api_url: str = DEFAULT_API_URL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float = DEFAULT_TIMEOUT
    editor: str = DEFAULT_EDITOR
    extensions: frozenset[str] = DEFAULT_EXTENSIONS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, load_files: bool = True) -> "Settings":
        if load_files:
            load_env_files()
        env = os.environ
        return cls(
            api_key=env.get("OPENROUTER_API_KEY", "").strip() or None,
            model=env.get("FINDER_MODEL", DEFAULT_MODEL),
            api_url=env.get("FINDER_API_URL", DEFAULT_API_URL),
            max_tokens=int(env.get("FINDER_MAX_TOKENS", DEFAULT_MAX_TOKENS)),
            timeout=float(env.get("FINDER_TIMEOUT", DEFAULT_TIMEOUT)),
            editor=(
                env.get("FINDER_EDITOR")
                or env.get("VISUAL")
                or env.get("EDITOR")
                or DEFAULT_EDITOR
            ),
            extensions=_parse_extensions(env.get("FINDER_EXTENSIONS")),
            log_level=env.get("FINDER_LOG_LEVEL", "INFO").upper(),
        )
