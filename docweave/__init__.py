"""docweave: convert documents between formats through one canonical tree."""

__version__ = "0.1.0"

from docweave.registry import (
    CodecRegistry,
    convert,
    decode,
    default_registry,
    dump,
    encode,
    load,
    match,
    read,
    write,
)

__all__ = [
    "CodecRegistry",
    "__version__",
    "convert",
    "decode",
    "default_registry",
    "dump",
    "encode",
    "load",
    "match",
    "read",
    "write",
]
