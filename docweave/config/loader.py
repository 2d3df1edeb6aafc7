"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import DocweaveConfig

logger = logging.getLogger(__name__)

_ENV_VAR = re.compile(r"\$\{(\w+)\}")


def config_paths(cli_path: str | None = None) -> list[Path]:
    """Candidate config files, highest precedence first."""
    paths = [Path("./docweave.yaml"), Path.home() / ".docweave" / "config.yaml"]
    return [Path(cli_path), *paths] if cli_path else paths


def load_config(cli_path: str | None = None) -> DocweaveConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults.

    An explicit ``cli_path`` that does not exist is an error rather than a
    silent fall back to the other locations.
    """
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    for path in config_paths(cli_path):
        if not path.exists():
            continue
        try:
            with open(path) as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping at the top level")
        try:
            config = DocweaveConfig.model_validate(_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return config

    return DocweaveConfig()


_active: DocweaveConfig | None = None


def get_config() -> DocweaveConfig:
    """Config in effect for codecs, loaded from the default locations on first use."""
    global _active
    if _active is None:
        _active = load_config()
    return _active


def set_config(config: DocweaveConfig | None) -> None:
    """Replace the config in effect; ``None`` reloads it on next use."""
    global _active
    _active = config


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings; unset variables become empty."""
    if isinstance(obj, str):
        return _ENV_VAR.sub(_env_value, obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _env_value(match: re.Match) -> str:
    name = match.group(1)
    if name not in os.environ:
        logger.warning("Config references unset environment variable %s", name)
    return os.environ.get(name, "")


# Default YAML template for `docweave config init`
DEFAULT_CONFIG_TEMPLATE = """\
# docweave.yaml

# Document conversion engine
pandoc:
  extra_args: []               # e.g. ["--wrap=none"]

# Headless browser used to render rpng images
browser:
  headless: true
  timeout_ms: 30000
  viewport_width: 800
  viewport_height: 600

# Directory collections
dir:
  patterns: ["**/*"]
  main_names: ["main", "index", "README"]   # earlier names win
  format: "html"               # format of files written by the dir codec

# Logging
log_level: "info"              # debug | info | warn | error
"""
