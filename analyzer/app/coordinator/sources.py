"""
File sources consumed by the coordinator.

A source exposes a file name and an awaitable read of its text. Reading
is the only suspension point of an analysis run; a read may fail with
OSError or UnicodeDecodeError, which the coordinator treats as an input
error scoped to that one file.
"""

from __future__ import annotations

from typing import Protocol, Union

import anyio


class SourceFile(Protocol):
    name: str

    async def read_text(self) -> str:
        ...


class InMemorySourceFile:
    """Already-loaded content (tests, programmatic callers)."""

    def __init__(self, name: str, content: str) -> None:
        self.name = name
        self._content = content

    async def read_text(self) -> str:
        return self._content

    def __repr__(self) -> str:
        return f"InMemorySourceFile({self.name!r}, {len(self._content)} chars)"


class PathSourceFile:
    """File on disk, read asynchronously through anyio."""

    def __init__(self, path: Union[str, "anyio.Path"], encoding: str = "utf-8") -> None:
        self.path = anyio.Path(path)
        self.name = self.path.name
        self._encoding = encoding

    async def read_text(self) -> str:
        return await self.path.read_text(encoding=self._encoding)

    def __repr__(self) -> str:
        return f"PathSourceFile({str(self.path)!r})"


class UploadSourceFile:
    """
    Raw bytes of a multipart upload received by the HTTP layer.

    Content must be UTF-8; anything else surfaces as UnicodeDecodeError
    when read.
    """

    def __init__(self, name: str, raw: bytes) -> None:
        self.name = name
        self._raw = raw

    async def read_text(self) -> str:
        return self._raw.decode("utf-8")

    def __repr__(self) -> str:
        return f"UploadSourceFile({self.name!r}, {len(self._raw)} bytes)"
