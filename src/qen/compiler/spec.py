"""Compiler IR spec - generated Python module intermediate representation."""

from dataclasses import dataclass, field
from typing import List, Optional


GENERATED_NOTICE = "Code generated by qen. DO NOT EDIT."


@dataclass
class ModelField:
    """A single member of a model class."""

    name: str  # attribute name, e.g. "class_"
    annotation: str  # e.g. "str", "list[TodoListInputTodos]"
    alias: Optional[str] = None  # template name when it differs from `name`


@dataclass
class ModelClass:
    """A pydantic model declaration."""

    name: str  # e.g. "TodoListInputTodos"
    fields: List[ModelField] = field(default_factory=list)
    path: str = ""  # dotted field path it describes, for the docstring

    @property
    def has_aliases(self) -> bool:
        return any(f.alias for f in self.fields)


@dataclass
class RenderFunction:
    """The entry point binding a template to its input model."""

    name: str  # e.g. "render_todo_list"
    param_annotation: str  # e.g. "TodoListInput", "list[RootArrayElement]"
    template_path: str  # template location, relative to the generated module
    root_name: Optional[str] = None  # set when the input is a root list


@dataclass
class GeneratedModule:
    """Complete generated module IR."""

    template_name: str  # e.g. "todo_list.html"
    namespace: str  # package the module is generated into
    models: List[ModelClass] = field(default_factory=list)  # dependencies first
    function: Optional[RenderFunction] = None
    notice: str = GENERATED_NOTICE

    @property
    def exports(self) -> List[str]:
        names = [m.name for m in self.models]
        if self.function is not None:
            names.append(self.function.name)
        return names
