"""Unit tests for config.py"""

import pytest

from pagemd.config import load_config


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run each test away from any project config.yaml."""
    monkeypatch.chdir(tmp_path)
    for name in ("DB_URL", "MAX_WORKERS", "CACHE_TTL", "LOG_LEVEL", "CALL_TIMEOUT"):
        monkeypatch.delenv(f"PAGEMD_{name}", raising=False)


def test_load_config_defaults():
    settings = load_config()
    assert settings.db_url == "sqlite:///pagemd.db"
    assert settings.max_workers == 4
    assert settings.cache_ttl == 300.0
    assert settings.call_timeout is None
    assert settings.default_status is None


def test_load_config_uses_env_db_url(monkeypatch):
    """PAGEMD_DB_URL env var is picked up by load_config."""
    monkeypatch.setenv("PAGEMD_DB_URL", "sqlite:///env.db")
    assert load_config().db_url == "sqlite:///env.db"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """PAGEMD_DB_URL takes precedence over config.yaml db_url."""
    (tmp_path / "config.yaml").write_text("db_url: 'sqlite:///project.db'\nmax_workers: 8\n")
    monkeypatch.setenv("PAGEMD_DB_URL", "sqlite:///override.db")
    settings = load_config()
    assert settings.db_url == "sqlite:///override.db"
    assert settings.max_workers == 8


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("PAGEMD_MAX_WORKERS", "3")
    assert load_config(overrides={"max_workers": 6}).max_workers == 6
    assert load_config(overrides={"max_workers": None}).max_workers == 3


def test_load_config_env_values_are_coerced(monkeypatch):
    monkeypatch.setenv("PAGEMD_CACHE_TTL", "0")
    monkeypatch.setenv("PAGEMD_CALL_TIMEOUT", "2.5")
    settings = load_config()
    assert settings.cache_ttl == 0
    assert settings.call_timeout == 2.5


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


@pytest.mark.parametrize("field,value", [
    ("max_workers", 0),
    ("cache_ttl", -1),
    ("log_level", "LOUD"),
])
def test_load_config_rejects_out_of_range(field, value):
    with pytest.raises(ValueError):
        load_config(overrides={field: value})
