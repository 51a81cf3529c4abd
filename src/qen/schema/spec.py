"""Schema spec - the structural description of data a template expects."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from qen.exceptions import InferenceAmbiguityWarning


class FieldKind(str, Enum):
    """Closed set of field kinds."""

    STRING = "string"
    BOOL = "bool"
    LIST = "list"
    NESTED = "nested"


@dataclass
class FieldSchema:
    """A node in the inferred schema.

    ``kind`` stays ``None`` only for a loop element that the loop body
    never touched; see :meth:`finalize`.
    """

    name: str
    kind: Optional[FieldKind] = None
    children: Dict[str, "FieldSchema"] = field(default_factory=dict)
    element: Optional["FieldSchema"] = None

    def child(self, name: str) -> "FieldSchema":
        """Return the member ``name``, creating it unclassified on first use."""
        if name not in self.children:
            self.children[name] = FieldSchema(name=name)
        return self.children[name]

    def finalize(self) -> None:
        if self.kind is None:
            self.kind = FieldKind.NESTED
        if self.kind is FieldKind.LIST:
            if self.element is None:
                self.element = FieldSchema(name=self.name)
            self.element.finalize()
        for member in self.children.values():
            member.finalize()

    def describe(self) -> object:
        """Plain structure for debugging and tests: scalars as kind names."""
        if self.kind is FieldKind.LIST:
            return [self.element.describe() if self.element else None]
        if self.kind is FieldKind.NESTED:
            return {name: f.describe() for name, f in self.children.items()}
        return self.kind.value if self.kind else None


@dataclass
class Schema:
    """Root of an inferred schema.

    In root-list mode the template iterates its context itself; ``element``
    then describes one item and ``fields`` is empty.
    """

    fields: Dict[str, FieldSchema] = field(default_factory=dict)
    root_list: bool = False
    element: Optional[FieldSchema] = None
    warnings: List[InferenceAmbiguityWarning] = field(default_factory=list)

    def describe(self) -> object:
        if self.root_list and self.element is not None:
            return [self.element.describe()]
        return {name: f.describe() for name, f in self.fields.items()}

