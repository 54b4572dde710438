"""Configuration resolution: precedence, coercion, files and auditing."""

import pytest

from browser_wand.config import (
    ConfigFileError,
    ConfigResolver,
    FrozenConfig,
    WandSettings,
    default_config,
    resolve_config,
    summarize_origins,
)
from browser_wand.config.env_loader import EnvironmentConfigLoader
from browser_wand.core.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


@pytest.fixture
def pyproject(tmp_path, monkeypatch):
    """Write a pyproject.toml and point the loader at it."""

    def _write(body: str):
        path = tmp_path / "pyproject.toml"
        path.write_text(body, encoding="utf-8")
        monkeypatch.setenv("BROWSER_WAND_PYPROJECT_PATH", str(path))
        return path

    return _write


def test_defaults_when_no_sources():
    resolved = ConfigResolver().resolve()
    assert resolved.values == default_config()
    assert set(resolved.origin.values()) == {"default"}
    assert resolved.values.max_chunk_size == 8000
    assert resolved.values.translation_batch_size == 15
    assert resolved.values.grounding_min_score == 3


def test_precedence_programmatic_over_env_over_file(monkeypatch, pyproject):
    pyproject(
        "[tool.browser_wand]\n"
        "model = 'file-model'\n"
        "max_results = 4\n"
        "translation_batch_size = 7\n"
    )
    monkeypatch.setenv("BROWSER_WAND_MODEL", "env-model")
    monkeypatch.setenv("BROWSER_WAND_MAX_RESULTS", "6")

    resolved = ConfigResolver().resolve({"model": "code-model"})

    assert resolved.values.model == "code-model"
    assert resolved.values.max_results == 6
    assert resolved.values.translation_batch_size == 7
    assert resolved.origin["model"] == "programmatic"
    assert resolved.origin["max_results"] == "env"
    assert resolved.origin["translation_batch_size"] == "file"
    assert resolved.origin["chunk_overlap"] == "default"


def test_env_strings_are_coerced(monkeypatch):
    monkeypatch.setenv("BROWSER_WAND_TEMPERATURE", "0.25")
    monkeypatch.setenv("BROWSER_WAND_REQUEST_TIMEOUT_SECONDS", "30")
    cfg = resolve_config()
    assert cfg.temperature == 0.25
    assert cfg.request_timeout_seconds == 30.0


def test_invalid_values_raise_configuration_error():
    with pytest.raises(ConfigurationError, match="max_chunk_size"):
        resolve_config({"max_chunk_size": 0})


def test_overlap_must_be_smaller_than_chunk_size():
    with pytest.raises(ConfigurationError, match="chunk_overlap"):
        resolve_config({"max_chunk_size": 100, "chunk_overlap": 100})


def test_unknown_keys_are_ignored():
    cfg = resolve_config({"not_a_field": 1, "max_results": 2})
    assert cfg.max_results == 2


def test_malformed_pyproject_raises(pyproject):
    path = pyproject("[tool.browser_wand\nmodel = 'x'\n")
    with pytest.raises(ConfigFileError) as excinfo:
        resolve_config()
    assert excinfo.value.file_path == path


def test_missing_pyproject_override_is_ignored():
    # The autouse fixture points the override at a file that does not exist.
    assert resolve_config() == default_config()


def test_missing_env_file_raises(tmp_path):
    with pytest.raises(ConfigurationError, match="Environment file not found"):
        resolve_config(use_env_file=tmp_path / "missing.env")


@pytest.mark.allow_dotenv
def test_env_file_is_loaded_without_overriding_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "BROWSER_WAND_MAX_RESULTS=3\nBROWSER_WAND_MODEL=dotenv-model\n", encoding="utf-8"
    )
    monkeypatch.setenv("BROWSER_WAND_MODEL", "shell-model")
    # Register the dotenv-provided variable so monkeypatch removes it afterwards.
    monkeypatch.setenv("BROWSER_WAND_MAX_RESULTS", "")
    monkeypatch.delenv("BROWSER_WAND_MAX_RESULTS")

    cfg = resolve_config(use_env_file=env_file)

    assert cfg.max_results == 3
    assert cfg.model == "shell-model"


def test_audit_redacts_api_key(monkeypatch):
    monkeypatch.setenv("BROWSER_WAND_API_KEY", "secret-key")
    resolved = ConfigResolver().resolve()

    audit = resolved.audit()
    assert "secret-key" not in audit
    assert "api_key: env:<redacted>" in audit
    assert "secret-key" not in repr(resolved.values)
    assert "secret-key" not in str(resolved)
    assert resolved.values.api_key == "secret-key"


def test_frozen_config_is_immutable_and_overridable(config):
    with pytest.raises(AttributeError):
        config.max_results = 1
    changed = config.with_overrides(max_results=1, bogus=True)
    assert changed.max_results == 1
    assert config.max_results == 10
    assert isinstance(changed, FrozenConfig)


def test_summarize_origins(monkeypatch):
    monkeypatch.setenv("BROWSER_WAND_MODEL", "m")
    resolved = ConfigResolver().resolve({"max_results": 1})
    counts = summarize_origins(resolved.origin)
    assert counts["env"] == 1
    assert counts["programmatic"] == 1
    assert counts["default"] == len(WandSettings.model_fields) - 2


def test_env_summary_redacts_key(monkeypatch):
    monkeypatch.setenv("BROWSER_WAND_API_KEY", "k")
    monkeypatch.setenv("BROWSER_WAND_MODEL", "m")
    summary = EnvironmentConfigLoader().get_env_summary()
    assert summary["BROWSER_WAND_API_KEY"] == "***redacted***"
    assert summary["BROWSER_WAND_MODEL"] == "m"
