"""Directories as nested Collections.

Each subdirectory becomes a Collection and each file a leaf document named
after its basename. Within a Collection one child may be the "main" part,
written to disk as ``index.<ext>``.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from docweave.codecs.base import Codec, DecodeOptions, EncodeOptions
from docweave.config import get_config
from docweave.errors import MalformedInput
from docweave.model import (
    Collection,
    CreativeWork,
    Node,
    as_article,
    is_creative_work,
)
from docweave.vfile import VFile

logger = logging.getLogger(__name__)


class DirDecodeOptions(DecodeOptions):
    # Glob patterns relative to the directory; defaults to every file
    patterns: list[str] | None = None
    # Basenames that make a file the main part, earlier names ranking higher
    main_names: list[str] | None = None


class DirEncodeOptions(EncodeOptions):
    pass


@dataclass
class _CollectionBuilder:
    """Mutable stand-in for a Collection while the tree is being assembled."""

    name: str | None
    parts: list[_CollectionBuilder | CreativeWork] = field(default_factory=list)
    children: dict[str, _CollectionBuilder] = field(default_factory=dict)

    def child(self, segment: str) -> _CollectionBuilder:
        """Existing sub-collection for ``segment``, or a new one attached here."""
        builder = self.children.get(segment)
        if builder is None:
            builder = _CollectionBuilder(name=segment)
            self.children[segment] = builder
            self.parts.append(builder)
        return builder

    def build(self, main_names: list[str]) -> Collection:
        parts = [
            part.build(main_names) if isinstance(part, _CollectionBuilder) else part
            for part in self.parts
        ]
        main = rank_main(parts, main_names)
        if main is not None:
            meta = {**(parts[main].meta or {}), "main": True}
            parts[main] = parts[main].model_copy(update={"meta": meta})
        return Collection(name=self.name, parts=parts)


def rank_main(parts: list[CreativeWork], main_names: list[str]) -> int | None:
    """Index of the part whose name appears earliest in ``main_names``."""
    best: tuple[int, int] | None = None
    for index, part in enumerate(parts):
        if part.name in main_names:
            rank = main_names.index(part.name)
            if best is None or rank < best[0]:
                best = (rank, index)
    return best[1] if best else None


def _route_key(route: tuple[str, ...]) -> tuple[int, str, str, tuple[str, ...]]:
    name = route[-1]
    return (len(route), name.casefold(), name, route)


def list_routes(root: Path, patterns: list[str]) -> list[tuple[str, ...]]:
    """Relative routes of matching files, sorted by depth then name."""
    routes: set[tuple[str, ...]] = set()
    for pattern in patterns:
        for path in root.glob(pattern):
            route = path.relative_to(root).parts
            if not route or any(part.startswith(".") for part in route):
                continue
            if path.is_file():
                routes.add(route)
    return sorted(routes, key=_route_key)


class DirCodec(Codec):
    name = "dir"
    media_types = ()
    ext_names = ("dir",)

    decode_options = DirDecodeOptions
    encode_options = DirEncodeOptions

    async def decode(self, file: VFile, options: DecodeOptions) -> Node:
        from docweave.registry import read

        if file.path is None or not file.path.is_dir():
            raise MalformedInput(
                str(file.path) if file.path else None, "a directory path is required"
            )
        root_path = file.path
        settings = get_config().dir
        patterns = getattr(options, "patterns", None)
        if patterns is None:
            patterns = settings.patterns
        main_names = getattr(options, "main_names", None)
        if main_names is None:
            main_names = settings.main_names

        routes = list_routes(root_path, patterns)
        logger.info("Decoding %d files under %s", len(routes), root_path)

        # Fail fast: the first failing read propagates and no Collection is built
        nodes = await asyncio.gather(
            *(read(root_path.joinpath(*route)) for route in routes)
        )

        root = _CollectionBuilder(name=root_path.name)
        for route, node in zip(routes, nodes):
            if not is_creative_work(node):
                logger.debug("Skipping %s: decoded to %s", "/".join(route), type(node).__name__)
                continue
            if node.name is None:
                node = node.model_copy(update={"name": Path(route[-1]).stem})
            parent = root
            for segment in route[:-1]:
                parent = parent.child(segment)
            parent.parts.append(node)

        return root.build(main_names)

    async def encode(self, node: Node, options: EncodeOptions) -> VFile:
        from docweave.registry import write

        dir_path = Path(options.file_path) if options.file_path else Path(tempfile.mkdtemp())
        format = options.format or get_config().dir.format

        if is_creative_work(node):
            work = node
        else:
            work = as_article(node)
        collection = work if isinstance(work, Collection) else Collection(parts=[work])

        leaves = list(walk(collection))
        for route, _ in leaves:
            dir_path.joinpath(*route[1:-1]).mkdir(parents=True, exist_ok=True)

        logger.info("Writing %d files to %s", len(leaves), dir_path)
        await asyncio.gather(
            *(
                write(leaf, dir_path.joinpath(*route[1:-1], _file_name(route, leaf, format)), format)
                for route, leaf in leaves
            )
        )
        return VFile(path=dir_path)


def walk(
    node: CreativeWork, route: tuple[str, ...] = ()
) -> list[tuple[tuple[str, ...], CreativeWork]]:
    """Flatten a Collection into (route, leaf) pairs, depth first.

    Routes start with the root Collection's name, so ``route[1:-1]`` is the
    leaf's directory relative to the output directory.
    """
    if isinstance(node, Collection):
        pairs: list[tuple[tuple[str, ...], CreativeWork]] = []
        for part in node.parts:
            pairs.extend(walk(part, (*route, node.name or "")))
        return pairs
    return [((*route, node.name or "unnamed"), node)]


def _file_name(route: tuple[str, ...], leaf: CreativeWork, format: str) -> str:
    if leaf.meta and leaf.meta.get("main"):
        return f"index.{format}"
    return f"{route[-1]}.{format}"

