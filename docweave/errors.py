"""Error taxonomy shared by the model, the bridge, the registry and codecs."""

from __future__ import annotations


class DocweaveError(Exception):
    """Base class for every conversion failure raised by docweave."""


class UnsupportedNodeKind(DocweaveError):
    """A node tag has no handler in the grammar being mapped to or from."""

    def __init__(self, kind: str, grammar: str = "canonical") -> None:
        self.kind = kind
        self.grammar = grammar
        super().__init__(f"Unsupported {grammar} node kind {kind!r}")


class MalformedInput(DocweaveError):
    """Content could not be parsed under its declared or sniffed format."""

    def __init__(
        self, source: str | None, detail: str, cause: Exception | None = None
    ) -> None:
        self.source = source
        self.detail = detail
        where = f" in {source}" if source else ""
        super().__init__(f"Malformed input{where}: {detail}")
        if cause is not None:
            self.__cause__ = cause


class UnsupportedOperation(DocweaveError):
    """A documented gap, e.g. a decode-only or encode-only codec."""


class CodecNotFound(UnsupportedOperation):
    """No registered codec matches the requested target."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"No codec could be found for {target!r}")


class MissingEmbeddedPayload(DocweaveError):
    """An image does not carry a text chunk under the expected keyword."""

    def __init__(self, keyword: str, source: str | None = None) -> None:
        self.keyword = keyword
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"No text chunk with keyword {keyword!r} found{where}")


class ResourceUnavailable(DocweaveError):
    """An external collaborator (browser, pandoc binary) could not be reached."""

    def __init__(self, resource: str, cause: Exception | None = None) -> None:
        self.resource = resource
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{resource} unavailable{detail}")
        if cause is not None:
            self.__cause__ = cause


def snippet(content: str | bytes | None, limit: int = 60) -> str:
    """Short, single-line preview of some content for error messages."""
    if content is None:
        return ""
    if isinstance(content, bytes):
        content = content[:limit].decode("utf-8", errors="replace")
    text = " ".join(content.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."
