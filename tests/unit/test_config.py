"""Unit tests for config.py"""

import pytest

from mdblog.config import Settings, load_config


@pytest.fixture(autouse=True)
def chdir_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_load_config_defaults():
    """Settings defaults apply when no config.yaml, env var, or override exists."""
    settings = load_config()
    assert settings.db_url == "sqlite:///mdblog.db"
    assert settings.required_fields == ["title", "date"]
    assert settings.output_format == "md"


def test_load_config_uses_env_db_url(monkeypatch):
    """MDBLOG_DB_URL env var is picked up by load_config."""
    monkeypatch.setenv("MDBLOG_DB_URL", "sqlite:///env.db")
    assert load_config().db_url == "sqlite:///env.db"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """Env vars take precedence over config.yaml."""
    (tmp_path / "config.yaml").write_text("static_dir: site/static\n")
    monkeypatch.setenv("MDBLOG_STATIC_DIR", "public")
    assert load_config().static_dir == "public"


def test_load_config_reads_config_yaml(tmp_path):
    """Values from config.yaml are applied."""
    (tmp_path / "config.yaml").write_text("content_dir: _posts\nallow_future_dates: true\n")
    settings = load_config()
    assert settings.content_dir == "_posts"
    assert settings.allow_future_dates is True


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDBLOG_OUTPUT_DIR", "env-dist")
    assert load_config(overrides={"output_dir": "cli-dist"}).output_dir == "cli-dist"
    assert load_config(overrides={"output_dir": None}).output_dir == "env-dist"


def test_load_config_env_max_versions_coerced(monkeypatch):
    """MDBLOG_MAX_VERSIONS is coerced to int."""
    monkeypatch.setenv("MDBLOG_MAX_VERSIONS", "3")
    assert load_config().max_versions == 3


def test_load_config_env_required_fields_split(monkeypatch):
    """MDBLOG_REQUIRED_FIELDS is a comma-separated list."""
    monkeypatch.setenv("MDBLOG_REQUIRED_FIELDS", "title, date ,tags")
    assert load_config().required_fields == ["title", "date", "tags"]


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path):
    """A config.yaml holding a list is rejected."""
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


def test_load_config_rejects_bad_output_format():
    """output_format must be md or mdx."""
    with pytest.raises(ValueError):
        load_config(overrides={"output_format": "html"})


def test_settings_fields_are_all_consumed():
    """Every setting is read by some command; config.yaml keys outside this set are ignored."""
    assert set(Settings.model_fields) == {
        "db_url", "content_dir", "static_dir", "output_dir", "output_format", "staging_dir",
        "parser_config", "max_versions", "required_fields", "allow_future_dates", "log_level",
    }


def test_unknown_config_key_is_ignored(tmp_path):
    (tmp_path / "config.yaml").write_text("app_name: blog\noutput_dir: public\n")
    assert load_config().output_dir == "public"
