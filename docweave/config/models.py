from pydantic import BaseModel, Field, field_validator
from typing import Literal


class PandocConfig(BaseModel):
    extra_args: list[str] = []


class BrowserConfig(BaseModel):
    headless: bool = True
    timeout_ms: int = Field(default=30000, gt=0)
    viewport_width: int = Field(default=800, gt=0)
    viewport_height: int = Field(default=600, gt=0)


class DirConfig(BaseModel):
    patterns: list[str] = ["**/*"]
    main_names: list[str] = ["main", "index", "README"]
    format: str = "html"

    @field_validator("patterns")
    @classmethod
    def _relative_patterns(cls, patterns: list[str]) -> list[str]:
        # Path.glob only accepts patterns relative to the collection root
        for pattern in patterns:
            if not pattern or pattern.startswith(("/", "\\")) or ".." in pattern.split("/"):
                raise ValueError(f"dir pattern {pattern!r} must be relative to the directory")
        return patterns

    @field_validator("main_names")
    @classmethod
    def _bare_names(cls, names: list[str]) -> list[str]:
        # Compared against file stems, so extensions and separators never match
        for name in names:
            if not name or "/" in name or "\\" in name:
                raise ValueError(f"main name {name!r} must be a file name without directories")
        return names

    @field_validator("format")
    @classmethod
    def _plain_format(cls, format: str) -> str:
        format = format.strip().lstrip(".").lower()
        if not format or "/" in format:
            raise ValueError("dir format must be a format name such as 'html' or 'md'")
        return format


class DocweaveConfig(BaseModel):
    pandoc: PandocConfig = Field(default_factory=PandocConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    dir: DirConfig = Field(default_factory=DirConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
