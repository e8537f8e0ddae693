"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDBLOG_"


class Settings(BaseModel):
    db_url:        str = "sqlite:///mdblog.db"
    content_dir:   str = Field(default="content",          description="Default directory holding the posts")
    static_dir:    str = Field(default="static",           description="Root for site-absolute (/...) link targets")
    output_dir:    str = Field(default="dist",             description="Directory for exported posts + JSON metadata")
    output_format: str = Field(default="md", pattern="^(md|mdx)$", description="md or mdx")
    staging_dir:   str = Field(default=".mdblog/staging",  description="Staging directory for extracted JSON")
    parser_config: str = Field(default="gfm-like",         description="MarkdownIt parser preset name")
    max_versions:  int = Field(default=10, ge=0, description="Max stored versions per post; 0 disables pruning")
    required_fields: list[str] = Field(default_factory=lambda: ["title", "date"])
    allow_future_dates: bool = False
    log_level:     str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def _from_env(name: str, val: str) -> Any:
    """Split comma-separated env values for list fields; pydantic coerces the rest."""
    if name == "required_fields":
        return [v.strip() for v in val.split(",") if v.strip()]
    return val


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDBLOG_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = _from_env(name, val)

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
