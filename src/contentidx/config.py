"""Application configuration: settings schema and config.yaml loader"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:        str = "contentidx"
    db_url:          str = "sqlite:///contentidx.db"
    schema_file:     Optional[str] = Field(default=None, description="YAML schema table; built-in schemas when unset")
    conflict_policy: str = Field(default="wait", pattern="^(wait|reject)$", description="Concurrent rebuild handling")
    log_level:       str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    kind_dirs:       dict[str, str] = Field(
        default_factory=lambda: {"team-member": "team", "product": "products", "document": "blog"},
        description="Content sub-directory per kind",
    )


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then CONTENTIDX_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"CONTENTIDX_{name.upper()}"):
            # Mapping-valued settings are passed as JSON in the environment.
            data[name] = json.loads(val) if name == "kind_dirs" else val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid settings: {e}") from e
