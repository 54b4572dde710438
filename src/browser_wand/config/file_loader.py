"""Project-level configuration from the `[tool.browser_wand]` table of pyproject.toml."""

import os
from pathlib import Path
import tomllib
from typing import Any

from browser_wand.core.exceptions import ConfigurationError

PYPROJECT_PATH_ENV = "BROWSER_WAND_PYPROJECT_PATH"


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(
        self, file_path: Path, message: str, cause: Exception | None = None
    ) -> None:
        self.file_path = file_path
        self.message = message
        self.cause = cause
        super().__init__(f"Config file error in {file_path}: {message}")


class FileConfigLoader:
    """Loads configuration values from pyproject.toml."""

    def load_project_config(self, project_root: Path | None = None) -> dict[str, Any]:
        """Load the `[tool.browser_wand]` table.

        Args:
            project_root: Directory to start the upward search from. Defaults
                to the current directory. `BROWSER_WAND_PYPROJECT_PATH`, when
                set, names the file directly and skips the search.

        Returns:
            The table's values, or an empty dict when there is no file or table.

        Raises:
            ConfigFileError: If the file exists but is not valid TOML, or the
                table is not a table.
        """
        pyproject_path = self._find_pyproject_toml(project_root)
        if pyproject_path is None:
            return {}

        try:
            with pyproject_path.open(mode="rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(
                pyproject_path, f"Failed to parse TOML: {e}", cause=e
            ) from e

        section = data.get("tool", {}).get("browser_wand", {})
        if not isinstance(section, dict):
            raise ConfigFileError(
                pyproject_path, "[tool.browser_wand] must be a table"
            )
        return dict(section)

    def _find_pyproject_toml(self, start_dir: Path | None = None) -> Path | None:
        """Find pyproject.toml by searching up the directory tree."""
        override = os.getenv(PYPROJECT_PATH_ENV)
        if override:
            path = Path(override)
            return path if path.is_file() else None

        current = Path(start_dir or Path.cwd()).resolve()
        for directory in (current, *current.parents):
            candidate = directory / "pyproject.toml"
            if candidate.is_file():
                return candidate
        return None
