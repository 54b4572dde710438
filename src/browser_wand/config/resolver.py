"""Configuration resolution with precedence handling.

Precedence, highest first: programmatic > environment > pyproject.toml > defaults.
"""

from functools import lru_cache
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from browser_wand.core.exceptions import ConfigurationError

from .audit import SourceTracker
from .env_loader import EnvironmentConfigLoader
from .file_loader import FileConfigLoader
from .schema import WandSettings, schema_defaults
from .types import FrozenConfig, ResolvedConfig

log = logging.getLogger(__name__)


class ConfigResolver:
    """Merges configuration from every source and validates the result once."""

    def __init__(self) -> None:
        self.file_loader = FileConfigLoader()
        self.env_loader = EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve configuration from all sources.

        Args:
            programmatic: Overrides with the highest precedence.
            use_env_file: Optional .env file to load before reading the environment.
            project_root: Directory to search upward from for pyproject.toml.

        Returns:
            ResolvedConfig with the validated values and their origins.

        Raises:
            ConfigurationError: If a file is malformed or the merged values
                fail validation.
        """
        tracker = SourceTracker()
        merged = schema_defaults()
        tracker.set_multiple(merged, "default")

        sources: list[tuple[Any, dict[str, Any]]] = [
            ("file", self.file_loader.load_project_config(project_root)),
        ]
        try:
            sources.append(("env", self.env_loader.load_env_config(use_env_file)))
        except FileNotFoundError as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e
        sources.append(("programmatic", programmatic or {}))

        for origin, values in sources:
            for field, value in values.items():
                if field not in merged:
                    log.debug("Ignoring unknown %s config key '%s'", origin, field)
                    continue
                merged[field] = value
                tracker.set_origin(field, origin)

        try:
            validated = WandSettings(**merged)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        return ResolvedConfig(
            values=FrozenConfig(**validated.to_dict()),
            origin=tracker.get_source_map(),
        )


def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> FrozenConfig:
    """Resolve and freeze configuration in one step."""
    resolved = ConfigResolver().resolve(
        overrides, use_env_file=use_env_file, project_root=project_root
    )
    return resolved.to_frozen()


@lru_cache(maxsize=1)
def default_config() -> FrozenConfig:
    """Return the schema defaults as a frozen config, ignoring env and files."""
    return FrozenConfig(**WandSettings(**schema_defaults()).to_dict())
