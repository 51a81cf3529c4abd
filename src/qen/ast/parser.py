from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from jinja2 import Environment, TemplateSyntaxError, nodes

from qen.exceptions import ParseError


class TemplateEnvironment(Environment):
    """Environment where ``a.b`` on a mapping reads the key ``b`` first.

    Template data arrives as plain dicts, so a field called ``items`` or
    ``values`` must not resolve to the dict method of the same name.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Mapping):
            try:
                return obj[attribute]
            except KeyError:
                pass
        return super().getattr(obj, attribute)


def create_environment(**options: Any) -> Environment:
    """Create the Jinja2 environment templates are parsed and rendered with.

    Loop controls (``{% break %}``/``{% continue %}``) are enabled so
    templates using them still parse. ``options`` override the defaults.
    """
    settings: Dict[str, Any] = {
        "extensions": ["jinja2.ext.loopcontrols"],
        "keep_trailing_newline": True,
        "autoescape": False,
    }
    settings.update(options)
    return TemplateEnvironment(**settings)


class Parser:
    def __init__(self, environment: Environment | None = None):
        self.environment = environment or create_environment()

    def parse(self, source: str, name: str | None = None) -> nodes.Template:
        """Parse template source into a Jinja2 AST.

        Raises:
            ParseError: If the template has a syntax error.
        """
        if not isinstance(source, str):
            raise TypeError("`source` must be a string containing a template")

        try:
            return self.environment.parse(source, name=name)
        except TemplateSyntaxError as exc:
            raise ParseError(exc.message or str(exc), lineno=exc.lineno, name=name) from exc
