"""Configuration parsing for qen.yaml

All keys are optional:

    root_name: root            # variable a template iterates to render a list
    type_suffix: Input         # TodoList + Input
    element_suffix: Element    # root list items: TodoList + Element
    function_prefix: render_   # render_todo_list
    namespace: templates       # defaults to the output directory name
    output_suffix: .py
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from qen.exceptions import ConfigError

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "qen.yaml"


class QenConfig(BaseModel):
    """Main qen.yaml configuration."""

    model_config = ConfigDict(extra="forbid")

    root_name: str = Field(
        default="root", description="Variable a root-list template iterates"
    )
    type_suffix: str = Field(default="Input", description="Suffix of root models")
    element_suffix: str = Field(
        default="Element", description="Suffix of root-list element models"
    )
    function_prefix: str = Field(
        default="render_", description="Prefix of render function names"
    )
    namespace: str | None = Field(
        default=None, description="Package name written into generated modules"
    )
    output_suffix: str = Field(default=".py", description="Generated file suffix")

    @field_validator("root_name")
    @classmethod
    def root_name_is_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"root_name must be an identifier, got {v!r}")
        return v

    @classmethod
    def load(cls, path: Path) -> "QenConfig":
        """Load config from yaml file"""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping at the top level")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid config in {path}: {exc}") from exc

    def merged(self, **overrides: Any) -> "QenConfig":
        """Return a copy with the non-None ``overrides`` applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        try:
            return self.model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise ConfigError(f"Invalid option: {exc}") from exc


def find_config_file(start: Path | None = None) -> Path | None:
    """Find qen.yaml in the start directory or its parents."""
    cwd = start or Path.cwd()
    for parent in [cwd] + list(cwd.parents):
        candidate = parent / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return None


def load_config(path: Path | None = None) -> QenConfig:
    """Load an explicit config file, a discovered qen.yaml, or the defaults."""
    if path is None:
        path = find_config_file()
        if path is None:
            log.debug("No %s found, using defaults", CONFIG_FILE_NAME)
            return QenConfig()
    log.debug("Loading config from %s", path)
    return QenConfig.load(path)
