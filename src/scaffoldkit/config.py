"""Project configuration loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import ScaffoldConfig

CONFIG_FILENAME = ".scaffoldkit.yaml"
PROJECT_NAME_ENV = "PROJECT_NAME"

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "ScaffoldKit Project Configuration",
    "type": "object",
    "properties": {
        "version": {"type": "string"},
        "project_name": {"type": "string"},
        "paths": {
            "type": "object",
            "additionalProperties": {"type": "string", "minLength": 1},
        },
    },
    "additionalProperties": False,
}

STARTER_CONFIG = """\
# ScaffoldKit project configuration
# =================================
# Run `scaffold new <table> -f name:TYPE` to generate an entity.
#
# project_name is the Go module path used in generated imports. The
# PROJECT_NAME environment variable takes precedence when it is set.

version: 1.0.0
project_name: "{project_name}"
paths:
  registry: models.json
  migrations: helpers/migrations.go
  routes: internals/routes.go
  model_list: helpers/model_list.go
  models_dir: models
  handlers_dir: handlers
  views_dir: views
"""


def load_config(project_root: Path) -> ScaffoldConfig:
    """Load configuration for a project.

    Args:
        project_root: Directory containing the Go project

    Returns:
        Validated configuration; defaults when no config file exists

    Raises:
        ConfigError: If the config file cannot be read or is invalid
    """
    config_path = Path(project_root) / CONFIG_FILENAME
    data: dict[str, Any] = {}

    if config_path.exists():
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            msg = f"Failed to parse config YAML: {e}"
            raise ConfigError(msg) from e
        except OSError as e:
            msg = f"Failed to read config file: {e}"
            raise ConfigError(msg) from e

        try:
            jsonschema.validate(data, CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            msg = f"Config validation failed: {e.message}"
            raise ConfigError(
                msg,
                details={"path": list(e.absolute_path)},
            ) from e

    env_project = os.environ.get(PROJECT_NAME_ENV)
    if env_project:
        data["project_name"] = env_project

    try:
        return ScaffoldConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Config validation failed: {e}"
        raise ConfigError(msg) from e


def write_starter_config(project_root: Path, project_name: str) -> Path:
    """Write a starter config file and return its path."""
    config_path = Path(project_root) / CONFIG_FILENAME
    config_path.write_text(
        STARTER_CONFIG.format(project_name=project_name),
        encoding="utf-8",
    )
    return config_path
