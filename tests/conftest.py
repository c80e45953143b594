"""Shared pytest fixtures: sample corpora and scripted chat transports."""

from __future__ import annotations

from typing import AsyncIterator, Optional

import anyio
import pytest

from finder.index import CorpusIndex
from finder.models import ChatRequest


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def notes_dir(tmp_path):
    """A small folder of markdown notes with some files that must be skipped."""
    root = tmp_path / "notes"
    (root / "guides").mkdir(parents=True)
    (root / ".hidden").mkdir()
    (root / "node_modules").mkdir()

    (root / "README.md").write_text(
        "# Finder\n\nInstall with cargo install finder.\nRun it in any folder.\n"
    )
    (root / "guides" / "setup.md").write_text(
        "Setup guide\n\nExport OPENROUTER_API_KEY before chatting.\n"
    )
    (root / "guides" / "notes.txt").write_text("plain text is not indexed by default\n")
    (root / ".hidden" / "secret.md").write_text("hidden note\n")
    (root / "node_modules" / "pkg.md").write_text("vendored\n")
    (root / "image.md").write_bytes(b"\x89PNG\x00\x00binary")
    return root


@pytest.fixture
def corpus():
    """Three documents; ``big.md`` has 50 numbered lines."""
    big = "\n".join(f"line {n} of the big document" for n in range(1, 51))
    return CorpusIndex.from_pairs(
        [
            ("README.md", "# Finder\n\nThe capital of France is Paris.\nInstall with cargo.\n"),
            ("docs/big.md", big),
            ("docs/cats.md", "cat facts\nc a t scattered\nconcatenate strings\n"),
        ]
    )


class ScriptedTransport:
    """Yields fixed increments, then optionally raises."""

    def __init__(
        self,
        chunks: tuple[str, ...] = (),
        error: Optional[Exception] = None,
        available: bool = True,
    ):
        self.chunks = chunks
        self.error = error
        self._available = available
        self.requests: list[ChatRequest] = []

    @property
    def available(self) -> bool:
        return self._available

    async def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        self.requests.append(request)
        for chunk in self.chunks:
            await anyio.sleep(0)
            yield chunk
        if self.error is not None:
            raise self.error


class GatedTransport(ScriptedTransport):
    """Yields ``chunks``, then waits for ``gate`` before yielding ``rest``."""

    def __init__(self, chunks: tuple[str, ...], rest: tuple[str, ...] = ()):
        super().__init__(chunks)
        self.rest = rest
        self.gate = anyio.Event()

    async def stream(self, request: ChatRequest) -> AsyncIterator[str]:
        self.requests.append(request)
        for chunk in self.chunks:
            yield chunk
        await self.gate.wait()
        for chunk in self.rest:
            yield chunk


@pytest.fixture
def transport():
    return ScriptedTransport(("See [README.md:3] ", "and [docs/big.md:12]."))
