from .loader import get_config, load_config, set_config
from .models import (
    BrowserConfig,
    DirConfig,
    DocweaveConfig,
    PandocConfig,
)

__all__ = [
    "BrowserConfig",
    "DirConfig",
    "DocweaveConfig",
    "PandocConfig",
    "get_config",
    "load_config",
    "set_config",
]
