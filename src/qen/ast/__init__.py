"""Template parsing, delegated to Jinja2."""

from qen.ast.parser import Parser, create_environment

__all__ = ["Parser", "create_environment"]
