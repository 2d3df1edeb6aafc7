"""Capability contract every format codec implements."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict

from docweave.errors import UnsupportedOperation
from docweave.model import Node
from docweave.vfile import VFile

OptionsT = TypeVar("OptionsT", bound="CodecOptions")


class CodecOptions(BaseModel):
    """Options accepted by a codec. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def coerce(cls: type[OptionsT], value: CodecOptions | dict[str, Any] | None) -> OptionsT:
        """Build options from a dict, ``None`` or another options object."""
        if value is None:
            return cls()
        if isinstance(value, BaseModel):
            value = value.model_dump()
        return cls.model_validate(value)


class DecodeOptions(CodecOptions):
    pass


class EncodeOptions(CodecOptions):
    file_path: Path | None = None
    format: str | None = None
    is_standalone: bool = True


class Codec(ABC):
    """A decoder/encoder between the canonical model and one external format.

    Codecs never call each other directly; a codec that needs another format
    (e.g. for the children of a container) goes through ``docweave.registry``.
    """

    name: ClassVar[str]
    media_types: ClassVar[tuple[str, ...]] = ()
    ext_names: ClassVar[tuple[str, ...]] = ()

    decode_options: ClassVar[type[DecodeOptions]] = DecodeOptions
    encode_options: ClassVar[type[EncodeOptions]] = EncodeOptions

    async def sniff(self, content: str | Path) -> bool:
        """Cheap check whether ``content`` (a path or raw text) is in this format."""
        return False

    @abstractmethod
    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        """Decode a file into a canonical node."""
        ...

    @abstractmethod
    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        """Encode a canonical node into a file."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class EncodeOnlyCodec(Codec):
    """Base for formats that can be written but not read back."""

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        raise UnsupportedOperation(f"The {self.name!r} codec does not support decoding")
