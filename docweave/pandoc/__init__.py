"""Bridge between the canonical model and pandoc's document AST."""

from docweave.pandoc.bridge import from_external, to_external
from docweave.pandoc.types import API_VERSION

__all__ = ["API_VERSION", "from_external", "to_external"]
