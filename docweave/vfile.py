"""Virtual files: content plus an optional path, passed between codecs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path

from docweave.errors import MalformedInput


@dataclass
class VFile:
    """Content that may or may not be backed by a file on disk.

    ``contents`` is ``None`` for a path that has not been read, or for a
    directory.
    """

    contents: str | bytes | None = None
    path: Path | None = None

    @property
    def suffix(self) -> str:
        """Extension without the leading dot, lower-cased."""
        return self.path.suffix[1:].lower() if self.path else ""

    def text(self) -> str:
        if self.contents is None:
            return ""
        if isinstance(self.contents, bytes):
            try:
                return self.contents.decode("utf-8")
            except UnicodeDecodeError as exc:
                source = str(self.path) if self.path else None
                raise MalformedInput(
                    source, f"not valid UTF-8 text (byte {exc.start})", exc
                ) from exc
        return self.contents

    def data(self) -> bytes:
        if self.contents is None:
            return b""
        if isinstance(self.contents, str):
            return self.contents.encode("utf-8")
        return self.contents


def load(contents: str | bytes) -> VFile:
    return VFile(contents=contents)


def dump(file: VFile) -> str:
    return file.text()


async def read(path: str | Path) -> VFile:
    """Read a file from disk. Directories are returned without contents."""
    path = Path(path)
    if path.is_dir():
        return VFile(path=path)
    contents = await asyncio.to_thread(path.read_bytes)
    return VFile(contents=contents, path=path)


async def write(file: VFile, path: str | Path) -> VFile:
    """Write a file's contents to ``path``, creating parent directories."""
    path = Path(path)
    await asyncio.to_thread(_write_sync, file.data(), path)
    return VFile(contents=file.contents, path=path)


def _write_sync(data: bytes, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
