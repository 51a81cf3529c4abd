"""Qen Exceptions

Errors raised while generating render bindings, and by the generated
render functions at call time.
"""

from __future__ import annotations


class QenError(Exception):
    """Base exception for all qen errors."""

    pass


class ParseError(QenError):
    """Raised when a template has malformed syntax."""

    def __init__(self, message: str, lineno: int | None = None, name: str | None = None):
        self.lineno = lineno
        self.name = name
        location = name or "<template>"
        if lineno is not None:
            location = f"{location}:{lineno}"
        super().__init__(f"{location}: {message}")


class NameCollisionError(QenError):
    """Raised when two schema fields synthesize the same generated name."""

    def __init__(self, type_name: str, first: tuple[str, ...], second: tuple[str, ...]):
        self.type_name = type_name
        self.first = first
        self.second = second
        super().__init__(
            f"Name '{type_name}' synthesized for both "
            f"'{_format_path(first)}' and '{_format_path(second)}'"
        )


def _format_path(path: tuple[str, ...]) -> str:
    return ".".join(path) or "<root>"


class ConfigError(QenError):
    """Raised when qen.yaml cannot be loaded."""

    pass


class TemplateLoadError(QenError):
    """Raised by a render function when its template cannot be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"error loading template {path}: {reason}")


class TemplateExecutionError(QenError):
    """Raised by a render function when the template fails to evaluate."""

    def __init__(self, name: str, reason: str):
        self.name = name
        super().__init__(f"error executing template {name}: {reason}")


class InferenceAmbiguityWarning(UserWarning):
    """The template iterates its root context and also uses top-level fields.

    Generation continues with a best-effort schema. ``lineno`` is the line
    of the loop over the root name.
    """

    def __init__(self, message: str, lineno: int | None = None):
        self.lineno = lineno
        super().__init__(message)
