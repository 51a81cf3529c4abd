"""Schema inference from template ASTs."""

from qen.schema.inferencer import DEFAULT_ROOT_NAME, SchemaInferencer, infer_schema
from qen.schema.spec import FieldKind, FieldSchema, Schema

__all__ = [
    "DEFAULT_ROOT_NAME",
    "FieldKind",
    "FieldSchema",
    "Schema",
    "SchemaInferencer",
    "infer_schema",
]
