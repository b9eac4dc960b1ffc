"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:       str = "pagemd"
    db_url:         str = "sqlite:///pagemd.db"
    base_url:       str = Field(default="pagemd://pages", description="Prefix for URLs of written pages")
    output_dir:     str = Field(default="dist", description="Directory for exported Markdown files")
    max_workers:    int = Field(default=4, ge=1, description="Max concurrently in-flight document-service calls")
    cache_ttl:      float = Field(default=300.0, ge=0, description="Listing cache lifetime in seconds; 0 disables")
    call_timeout:   Optional[float] = Field(default=None, gt=0, description="Per-call timeout in seconds")
    default_status: Optional[str] = Field(default=None, description="Status given to imported pages without one")
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then PAGEMD_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"PAGEMD_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
