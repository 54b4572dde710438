"""Configuration management.

Configuration is resolved once from all sources, validated, then frozen and
passed explicitly to every component that needs it.

Key components:
- WandSettings: Pydantic schema owning defaults and validation
- ResolvedConfig: Validated values plus the origin of each field
- FrozenConfig: Immutable configuration used by the pipeline
"""

from .audit import SourceTracker, summarize_origins
from .file_loader import ConfigFileError, FileConfigLoader
from .resolver import ConfigResolver, default_config, resolve_config
from .schema import WandSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "FileConfigLoader",
    "FrozenConfig",
    "ResolvedConfig",
    "SourceMap",
    "SourceTracker",
    "WandSettings",
    "default_config",
    "resolve_config",
    "summarize_origins",
]
