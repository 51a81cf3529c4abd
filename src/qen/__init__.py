"""Qen - typed render bindings inferred from Jinja2 templates"""

from qen._version import __version__
from qen.compiler import Compiler, Renderer, generate
from qen.config import QenConfig, load_config
from qen.exceptions import (
    ConfigError,
    InferenceAmbiguityWarning,
    NameCollisionError,
    ParseError,
    QenError,
    TemplateExecutionError,
    TemplateLoadError,
)
from qen.schema import FieldKind, FieldSchema, Schema, infer_schema

__all__ = [
    "__version__",
    # pipeline
    "Compiler",
    "Renderer",
    "generate",
    "infer_schema",
    # schema
    "FieldKind",
    "FieldSchema",
    "Schema",
    # config
    "QenConfig",
    "load_config",
    # errors
    "ConfigError",
    "InferenceAmbiguityWarning",
    "NameCollisionError",
    "ParseError",
    "QenError",
    "TemplateExecutionError",
    "TemplateLoadError",
]
