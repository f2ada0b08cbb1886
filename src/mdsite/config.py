"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from mdsite.errors import ConfigError


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDSITE_"


class Settings(BaseModel):
    app_name:      str = "mdsite"
    site_title:    str = Field(default="Documentation", description="Title shown on the index page and breadcrumbs")
    output_dir:    str = Field(default="site",          description="Directory for the rendered static site")
    parser_config: str = Field(default="gfm-like",      description="MarkdownIt parser preset name")
    max_workers:   int = Field(default=0,  ge=0,        description="Worker threads for load/render; 0 = CPU count")
    toc_depth:     int = Field(default=3,  ge=1, le=6,  description="Deepest heading level listed in a page TOC")
    search_index:  bool = Field(default=True,           description="Write search-index.json alongside the site")
    report_file:   str = Field(default="build-report.json", description="Build report file name inside the output dir")
    db_url:        str = Field(default="sqlite:///mdsite.db", description="Database URL for export-graph")
    strict:        bool = Field(default=False,          description="Treat any detected problem as a build failure")
    templates_dir: Optional[str] = Field(default=None,  description="Directory with page.html/index.html overrides")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid {CONFIG_FILE}: expected a mapping", CONFIG_FILE)

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
