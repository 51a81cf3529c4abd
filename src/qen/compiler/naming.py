"""Class and function names for generated bindings.

Every ``NESTED`` node of a schema becomes a model class. Names are derived
from the field path: a field ``address`` under the class ``ReportInputUser``
becomes ``ReportInputUserAddress``. List layers add nothing to the name, so
the element class of ``todos`` under ``TodoListInput`` is ``TodoListInputTodos``.
"""

from __future__ import annotations

import keyword
import logging
import re
from typing import Dict, Tuple

from pydantic import BaseModel

from qen.exceptions import NameCollisionError
from qen.schema.spec import FieldKind, FieldSchema, Schema

log = logging.getLogger(__name__)

# Field path from the root; the root model itself is ()
TypePath = Tuple[str, ...]

_WORD_BOUNDARY = re.compile(r"[\W_]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def to_camel_case(s: str) -> str:
    """Upper-case the first letter of each word and drop the separators.

    ``page_title`` -> ``PageTitle``, ``todo-list`` -> ``TodoList``.
    The rest of each word is left as is, so ``userID`` -> ``UserID``.
    """
    words = [w for w in _WORD_BOUNDARY.split(s) if w]
    return "".join(w[0].upper() + w[1:] for w in words)


def to_snake_case(s: str) -> str:
    """``todo-list`` -> ``todo_list``, ``TodoList`` -> ``todo_list``."""
    s = _CAMEL_BOUNDARY.sub("_", s)
    words = [w for w in _WORD_BOUNDARY.split(s) if w]
    return "_".join(words).lower()


def _identifier(name: str, fallback: str) -> str:
    if not name:
        name = fallback
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


def template_type_name(template_id: str, suffix: str = "Input") -> str:
    """Root model name for a template: ``todo_list`` -> ``TodoListInput``."""
    return _identifier(to_camel_case(template_id), "Template") + suffix


def render_function_name(template_id: str, prefix: str = "render_") -> str:
    """Render function name for a template: ``todo_list`` -> ``render_todo_list``."""
    return _identifier(prefix + to_snake_case(template_id), "render")


# Names a pydantic model field may not take as-is
_MODEL_ATTRIBUTES = frozenset(dir(BaseModel))


def attribute_name(name: str) -> str:
    """Python attribute for a template field name.

    Names that pydantic cannot use directly (keywords, leading underscores,
    ``BaseModel`` attributes) get a trailing underscore; the template name
    is kept as the field alias.
    """
    attr = name.lstrip("_") or "field"
    if (
        attr != name
        or keyword.iskeyword(attr)
        or attr in _MODEL_ATTRIBUTES
        or attr.startswith("model_")
    ):
        attr += "_"
    return attr


def innermost(f: FieldSchema) -> FieldSchema:
    """Follow list layers down to the first non-list element."""
    while f.kind is FieldKind.LIST and f.element is not None:
        f = f.element
    return f


class NameSynthesizer:
    """Assigns a unique class name to every nested node of a schema."""

    def __init__(self, root_type: str, element_type: str):
        self.root_type = root_type
        self.element_type = element_type
        self._names: Dict[TypePath, str] = {}
        self._owners: Dict[str, TypePath] = {}

    def synthesize(self, schema: Schema) -> Dict[TypePath, str]:
        """Return ``{path: class name}`` for the schema.

        Raises:
            NameCollisionError: If two nodes produce the same class name.
        """
        self._names = {}
        self._owners = {}

        if schema.root_list:
            element = innermost(schema.element) if schema.element else None
            if element is not None and element.kind is FieldKind.NESTED:
                self._claim((), self.element_type)
                self._assign_members(element.children, (), self.element_type)
        else:
            self._claim((), self.root_type)
            self._assign_members(schema.fields, (), self.root_type)

        log.debug("Synthesized %d type name(s)", len(self._names))
        return dict(self._names)

    def _assign_members(
        self, members: Dict[str, FieldSchema], path: TypePath, outer: str
    ) -> None:
        for member in members.values():
            target = innermost(member)
            if target.kind is not FieldKind.NESTED:
                continue
            member_path = path + (member.name,)
            name = outer + to_camel_case(member.name)
            self._claim(member_path, name)
            self._assign_members(target.children, member_path, name)

    def _claim(self, path: TypePath, name: str) -> None:
        if name in self._owners:
            raise NameCollisionError(name, self._owners[name], path)
        self._owners[name] = path
        self._names[path] = name
