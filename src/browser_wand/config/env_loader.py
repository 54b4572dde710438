"""Environment variable configuration loading.

Reads `BROWSER_WAND_*` variables, optionally after loading a .env file with
python-dotenv. Only variables that are actually set are returned, so the
resolver can attribute each field to the environment accurately.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .schema import WandSettings

ENV_PREFIX = "BROWSER_WAND_"


class EnvironmentConfigLoader:
    """Loads configuration values from the process environment."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Return field values for every `BROWSER_WAND_*` variable that is set.

        Args:
            env_file: Optional .env file loaded first. Variables already in
                the environment are not overwritten.

        Raises:
            FileNotFoundError: If `env_file` is given but does not exist.
        """
        if env_file:
            env_path = Path(env_file)
            if not env_path.is_file():
                raise FileNotFoundError(f"Environment file not found: {env_path}")
            load_dotenv(env_path, override=False)

        values: dict[str, Any] = {}
        for field_name in WandSettings.model_fields:
            env_var = f"{ENV_PREFIX}{field_name.upper()}"
            if env_var in os.environ:
                values[field_name] = os.environ[env_var]
        return values

    def get_env_summary(self) -> dict[str, str]:
        """Return the set `BROWSER_WAND_*` variables, with the API key redacted."""
        summary = {}
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                summary[key] = "***redacted***" if key.endswith("API_KEY") else value
        return summary
