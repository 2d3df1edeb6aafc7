"""Thin async wrapper around the pandoc binary, driven through pypandoc."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import pypandoc

from docweave.errors import MalformedInput, ResourceUnavailable

logger = logging.getLogger(__name__)

# Format name pandoc uses for its JSON AST on both input and output
AST_FORMAT = "json"


def available() -> bool:
    """Whether a pandoc binary can be found."""
    try:
        pypandoc.get_pandoc_version()
    except OSError:
        return False
    return True


async def convert(
    text: str,
    to: str,
    from_: str,
    extra_args: Sequence[str] = (),
) -> str:
    """Run pandoc on ``text`` in a worker thread and return its output.

    Raises ResourceUnavailable when pandoc cannot be run and MalformedInput
    when pandoc rejects the input.
    """
    args = list(extra_args)
    logger.debug("pandoc %s -> %s %s", from_, to, " ".join(args))
    try:
        return await asyncio.to_thread(
            pypandoc.convert_text,
            text,
            to,
            format=from_,
            extra_args=args,
        )
    except OSError as exc:
        raise ResourceUnavailable("pandoc", exc) from exc
    except RuntimeError as exc:
        raise MalformedInput(None, f"pandoc could not read {from_} input ({exc})", exc) from exc
