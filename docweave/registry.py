"""Codec registry: format resolution and the generic conversion entry points.

Resolution, first match wins and ties go to registration order:

1. an explicit format, matched against codec names, extension names and
   media types;
2. a path that is a directory resolves to the ``dir`` codec;
3. the extension of the path;
4. the media type, given or guessed from the path;
5. a content sniff, tried on each codec in turn.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from docweave import vfile
from docweave.codecs import CODECS
from docweave.codecs.base import Codec, CodecOptions
from docweave.errors import CodecNotFound
from docweave.model import Node
from docweave.vfile import VFile

logger = logging.getLogger(__name__)

Options = CodecOptions | dict[str, Any] | None


class CodecRegistry:
    """An ordered, immutable set of codecs."""

    def __init__(self, codecs: Iterable[Codec]) -> None:
        self._codecs: tuple[Codec, ...] = tuple(codecs)

    @property
    def codecs(self) -> tuple[Codec, ...]:
        return self._codecs

    def get(self, name: str) -> Codec:
        for codec in self._codecs:
            if codec.name == name:
                return codec
        raise CodecNotFound(name)

    async def match(
        self,
        target: str | Path | None = None,
        format: str | None = None,
        media_type: str | None = None,
    ) -> Codec:
        """Resolve the codec for a path, some content and/or a format name."""
        if format:
            codec = self._by_format(format.lower())
            if codec is None:
                raise CodecNotFound(format)
            logger.debug("Matched codec %r by format %r", codec.name, format)
            return codec

        path = _as_path(target)
        if path is not None:
            if os.path.isdir(path):
                return self.get("dir")
            ext = path.suffix[1:].lower()
            if ext:
                codec = self._by_ext(ext)
                if codec is not None:
                    logger.debug("Matched codec %r by extension %r", codec.name, ext)
                    return codec
            if media_type is None:
                media_type, _ = mimetypes.guess_type(path.name)

        if media_type:
            codec = self._by_media_type(media_type)
            if codec is not None:
                logger.debug("Matched codec %r by media type %r", codec.name, media_type)
                return codec

        if target is not None:
            for codec in self._codecs:
                if await codec.sniff(target):
                    logger.debug("Matched codec %r by sniffing", codec.name)
                    return codec

        raise CodecNotFound(str(target) if target is not None else "")

    def _by_format(self, format: str) -> Codec | None:
        for codec in self._codecs:
            if codec.name == format or format in codec.ext_names or format in codec.media_types:
                return codec
        return None

    def _by_ext(self, ext: str) -> Codec | None:
        for codec in self._codecs:
            if ext in codec.ext_names:
                return codec
        return None

    def _by_media_type(self, media_type: str) -> Codec | None:
        for codec in self._codecs:
            if media_type in codec.media_types:
                return codec
        return None

    # -- entry points -------------------------------------------------------

    async def decode(
        self, file: VFile, format: str | None = None, options: Options = None
    ) -> Node:
        target = file.path if file.path is not None else file.contents
        if isinstance(target, bytes):
            target = None
        codec = await self.match(target, format)
        return await codec.decode(file, codec.decode_options.coerce(options))

    async def encode(
        self, node: Node, format: str | None = None, options: Options = None, **kwargs: Any
    ) -> VFile:
        opts = _merge(options, kwargs)
        codec = await self.match(opts.get("file_path"), format)
        return await codec.encode(node, codec.encode_options.coerce(opts))

    async def load(self, content: str, format: str, options: Options = None) -> Node:
        return await self.decode(vfile.load(content), format, options)

    async def dump(
        self, node: Node, format: str, options: Options = None, **kwargs: Any
    ) -> str:
        file = await self.encode(node, format, options, **kwargs)
        return vfile.dump(file)

    async def read(
        self, content: str | Path, format: str | None = None, options: Options = None
    ) -> Node:
        """Decode a file, or the content itself when it is not an existing path."""
        path = _as_path(content)
        if path is not None and os.path.exists(path):
            file = await vfile.read(path)
        else:
            file = vfile.load(str(content))
        return await self.decode(file, format, options)

    async def write(
        self,
        node: Node,
        path: str | Path,
        format: str | None = None,
        options: Options = None,
        **kwargs: Any,
    ) -> VFile:
        path = Path(path)
        file = await self.encode(node, format, options, file_path=path, **kwargs)
        # Codecs that write to disk themselves return the path they wrote
        if file.contents is not None:
            file = await vfile.write(file, path)
        return file

    async def convert(
        self,
        input: str | Path,
        output: str | Path | None = None,
        from_format: str | None = None,
        to_format: str | None = None,
        decode_options: Options = None,
        encode_options: Options = None,
    ) -> str | None:
        """Read ``input`` and write it to ``output``, or return it as text."""
        node = await self.read(input, from_format, decode_options)
        if output is None:
            return await self.dump(node, to_format or "json", encode_options)
        file = await self.write(node, output, to_format, encode_options)
        return str(file.path) if file.path else None


def _as_path(target: str | Path | bytes | None) -> Path | None:
    if isinstance(target, Path):
        return target
    if isinstance(target, str) and target and "\n" not in target and len(target) < 4096:
        return Path(target)
    return None


def _merge(options: Options, extra: dict[str, Any]) -> dict[str, Any]:
    if isinstance(options, CodecOptions):
        merged = options.model_dump(exclude_unset=True)
    else:
        merged = dict(options or {})
    merged.update(extra)
    return merged


default_registry = CodecRegistry(CODECS)


async def match(
    target: str | Path | None = None,
    format: str | None = None,
    media_type: str | None = None,
) -> Codec:
    return await default_registry.match(target, format, media_type)


async def decode(file: VFile, format: str | None = None, options: Options = None) -> Node:
    return await default_registry.decode(file, format, options)


async def encode(
    node: Node, format: str | None = None, options: Options = None, **kwargs: Any
) -> VFile:
    return await default_registry.encode(node, format, options, **kwargs)


async def load(content: str, format: str, options: Options = None) -> Node:
    return await default_registry.load(content, format, options)


async def dump(node: Node, format: str, options: Options = None, **kwargs: Any) -> str:
    return await default_registry.dump(node, format, options, **kwargs)


async def read(
    content: str | Path, format: str | None = None, options: Options = None
) -> Node:
    return await default_registry.read(content, format, options)


async def write(
    node: Node,
    path: str | Path,
    format: str | None = None,
    options: Options = None,
    **kwargs: Any,
) -> VFile:
    return await default_registry.write(node, path, format, options, **kwargs)


async def convert(
    input: str | Path,
    output: str | Path | None = None,
    from_format: str | None = None,
    to_format: str | None = None,
    decode_options: Options = None,
    encode_options: Options = None,
) -> str | None:
    return await default_registry.convert(
        input, output, from_format, to_format, decode_options, encode_options
    )
