"""
Global test configuration with environment isolation.
"""

import os

import pytest

from browser_wand.config import default_config


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading .env files during tests.

    Tests should only see environment they explicitly set. Mark a test with
    @pytest.mark.allow_dotenv to permit .env loading.
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    monkeypatch.setattr(
        "browser_wand.config.env_loader.load_dotenv",
        lambda *_args, **_kwargs: False,
    )


@pytest.fixture(autouse=True)
def isolate_wand_env(request, monkeypatch, tmp_path):
    """Ensure a clean BROWSER_WAND_* environment and no real pyproject.toml.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the environment.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("BROWSER_WAND_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.setenv(
        "BROWSER_WAND_PYPROJECT_PATH", str(tmp_path / "no-such-pyproject.toml")
    )


# --- Shared fixtures ---
@pytest.fixture
def config():
    """Default frozen configuration, independent of env and files."""
    return default_config()

