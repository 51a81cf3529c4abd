"""Runtime support for generated render functions.

Generated modules call :func:`load_template` and :func:`execute`; both raise
qen errors so callers only need to handle :class:`qen.exceptions.QenError`.
"""

from __future__ import annotations

import io
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
)
from pydantic import TypeAdapter, ValidationError

from qen.ast.parser import create_environment
from qen.exceptions import TemplateExecutionError, TemplateLoadError

log = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_environment(directory: str) -> Environment:
    """Return the shared environment for templates in ``directory``.

    Undefined values raise instead of rendering as empty strings.
    """
    return create_environment(
        loader=FileSystemLoader(directory),
        undefined=StrictUndefined,
        auto_reload=True,
    )


def load_template(path: str | Path) -> Template:
    """Load and parse the template at ``path``.

    Raises:
        TemplateLoadError: If the file cannot be read or has a syntax error.
    """
    p = Path(path)
    env = get_environment(str(p.parent.resolve()))
    try:
        return env.get_template(p.name)
    except TemplateNotFound as exc:
        raise TemplateLoadError(str(p), "file not found") from exc
    except TemplateSyntaxError as exc:
        raise TemplateLoadError(str(p), f"line {exc.lineno}: {exc.message}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateLoadError(str(p), str(exc)) from exc


def execute(
    template: Template,
    adapter: TypeAdapter,
    data: Any,
    root_name: str | None = None,
) -> str:
    """Validate ``data`` with ``adapter`` and render ``template`` with it.

    Args:
        template: Template returned by :func:`load_template`.
        adapter: Adapter for the generated input type.
        data: A model instance, or anything the adapter can validate.
        root_name: Context variable to bind a root list to.

    Returns:
        The rendered text.

    Raises:
        TemplateExecutionError: If ``data`` does not fit the input type or
            the template fails while rendering.
    """
    name = template.name or "<template>"
    try:
        value = adapter.validate_python(data)
    except ValidationError as exc:
        raise TemplateExecutionError(name, f"invalid input: {exc}") from exc

    context = adapter.dump_python(value, by_alias=True)
    if root_name is not None:
        context = {root_name: context}

    buf = io.StringIO()
    try:
        template.stream(context).dump(buf)
    except TemplateError as exc:
        raise TemplateExecutionError(name, str(exc)) from exc
    except Exception as exc:
        # filters and tests run arbitrary Python
        raise TemplateExecutionError(name, f"{type(exc).__name__}: {exc}") from exc

    log.debug("Rendered %s (%d chars)", name, buf.tell())
    return buf.getvalue()
