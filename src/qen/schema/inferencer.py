"""Schema inference - walks a Jinja2 AST and records how the template uses its data.

Every field-access chain (``user.address.city``) found in the template is
recorded into a tree of :class:`FieldSchema` nodes:

- ``{{ chain }}`` classifies the last segment as ``STRING``
- ``{% if chain %}`` classifies the last segment as ``BOOL``
- ``{% for x in chain %}`` classifies the last segment as ``LIST`` and binds
  ``x`` to its element, so ``x.title`` is recorded on the element
- intermediate segments are always ``NESTED``

The first classification of a field wins. Later incompatible uses are logged
and ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from jinja2 import nodes
from jinja2.defaults import DEFAULT_NAMESPACE
from jinja2.visitor import NodeVisitor

from qen.exceptions import InferenceAmbiguityWarning
from qen.schema.spec import FieldKind, FieldSchema, Schema

log = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "root"

# Names the loop statement binds on its own
LOOP_VARIABLE = "loop"


@dataclass
class _Alias:
    """A local name bound to a field chain by ``with`` or ``set``.

    ``element`` is the loop element the chain starts from, or None when it
    starts at the top level.
    """

    chain: Tuple[str, ...]
    element: Optional[FieldSchema] = None


# A loop element, an alias, or None for a local we know nothing about
_Binding = Union[FieldSchema, _Alias, None]


@dataclass
class _Frame:
    """Lexical names visible in a template region."""

    bindings: Dict[str, _Binding] = field(default_factory=dict)
    parent: Optional["_Frame"] = None

    def lookup(self, name: str) -> Tuple[bool, _Binding]:
        frame: Optional[_Frame] = self
        while frame is not None:
            if name in frame.bindings:
                return True, frame.bindings[name]
            frame = frame.parent
        return False, None

    def child(self) -> "_Frame":
        return _Frame(parent=self)


def field_chain(expr: nodes.Node) -> Optional[List[str]]:
    """Return ``["user", "address", "city"]`` for ``user.address.city``.

    Constant string subscripts count as segments (``user["address"]``).
    Returns None when ``expr`` is not a plain field-access chain.
    """
    segments: List[str] = []
    while True:
        if isinstance(expr, nodes.Getattr):
            segments.append(expr.attr)
            expr = expr.node
        elif (
            isinstance(expr, nodes.Getitem)
            and isinstance(expr.arg, nodes.Const)
            and isinstance(expr.arg.value, str)
            and expr.arg.value.isidentifier()
        ):
            segments.append(expr.arg.value)
            expr = expr.node
        elif isinstance(expr, nodes.Name) and expr.ctx == "load":
            segments.append(expr.name)
            segments.reverse()
            return segments
        else:
            return None


class SchemaInferencer(NodeVisitor):
    """Builds a :class:`Schema` from one parsed template.

    An instance holds the state of a single walk; use :func:`infer_schema`.
    """

    def __init__(self, root_name: str = DEFAULT_ROOT_NAME, name: Optional[str] = None):
        self.root_name = root_name
        self.name = name or "<template>"
        self.fields: Dict[str, FieldSchema] = {}
        self.iterates_root = False
        self.root_lineno: Optional[int] = None
        self.ignored_names = set(DEFAULT_NAMESPACE)

    def infer(self, template: nodes.Template) -> Schema:
        self.visit(template, _Frame())
        return self._build()

    def _build(self) -> Schema:
        for f in self.fields.values():
            f.finalize()

        if not self.iterates_root:
            return Schema(fields=self.fields)

        if len(self.fields) == 1:
            root = self.fields[self.root_name]
            return Schema(root_list=True, element=root.element)

        siblings = [name for name in self.fields if name != self.root_name]
        warning = InferenceAmbiguityWarning(
            f"{self.name}: template iterates '{self.root_name}' but also uses "
            f"top-level field(s) {', '.join(siblings)}; '{self.root_name}' is emitted as "
            "an ordinary list field",
            lineno=self.root_lineno,
        )
        log.debug("%s", warning)
        return Schema(fields=self.fields, warnings=[warning])

    # -- statements ---------------------------------------------------------

    def generic_visit(self, node: nodes.Node, *args, **kwargs) -> None:
        log.debug("Not inferring from %s node", type(node).__name__)

    def visit_body(self, body: List[nodes.Node], frame: _Frame) -> None:
        for child in body:
            self.visit(child, frame)

    def visit_Template(self, node: nodes.Template, frame: _Frame) -> None:
        self.visit_body(node.body, frame)

    visit_Block = visit_Template
    visit_Scope = visit_Template
    visit_ScopedEvalContextModifier = visit_Template
    visit_FilterBlock = visit_Template

    def visit_Output(self, node: nodes.Output, frame: _Frame) -> None:
        for expr in node.nodes:
            if isinstance(expr, nodes.TemplateData):
                continue
            self.record_expr(expr, frame)

    def visit_If(self, node: nodes.If, frame: _Frame) -> None:
        self.record_test(node.test, frame)
        self.visit_body(node.body, frame)
        for branch in node.elif_:
            self.visit_If(branch, frame)
        self.visit_body(node.else_, frame)

    def visit_For(self, node: nodes.For, frame: _Frame) -> None:
        element = self.record_loop_source(node.iter, frame)
        if self.iterates_root and self.root_lineno is None:
            self.root_lineno = node.lineno

        body_frame = frame.child()
        self._bind_target(node.target, element, body_frame)
        body_frame.bindings[LOOP_VARIABLE] = None

        if node.test is not None:
            self.record_test(node.test, body_frame)
        self.visit_body(node.body, body_frame)
        self.visit_body(node.else_, frame)

    def visit_With(self, node: nodes.With, frame: _Frame) -> None:
        # No schema scope of its own: the body records into the enclosing one
        body_frame = frame.child()
        for target, value in zip(node.targets, node.values):
            self._bind_assignment(target, value, frame, body_frame)
        self.visit_body(node.body, body_frame)

    def visit_Assign(self, node: nodes.Assign, frame: _Frame) -> None:
        self._bind_assignment(node.target, node.node, frame, frame)

    def visit_AssignBlock(self, node: nodes.AssignBlock, frame: _Frame) -> None:
        self.visit_body(node.body, frame)
        self._bind_target(node.target, None, frame)

    # -- expressions --------------------------------------------------------

    def record_expr(self, expr: nodes.Node, frame: _Frame) -> None:
        """Record every field chain inside ``expr`` as interpolated text."""
        if isinstance(expr, nodes.CondExpr):
            self.record_test(expr.test, frame)
            self.record_expr(expr.expr1, frame)
            if expr.expr2 is not None:
                self.record_expr(expr.expr2, frame)
            return

        chain = field_chain(expr)
        if chain is not None:
            self.record(chain, FieldKind.STRING, frame)
            return

        if isinstance(expr, nodes.Call):
            # method calls record their receiver; plain calls are functions
            if isinstance(expr.node, nodes.Getattr):
                self.record_expr(expr.node.node, frame)
            for arg in expr.args:
                self.record_expr(arg, frame)
            for kwarg in expr.kwargs:
                self.record_expr(kwarg.value, frame)
            for dyn in (expr.dyn_args, expr.dyn_kwargs):
                if dyn is not None:
                    self.record_expr(dyn, frame)
            return

        for child in expr.iter_child_nodes():
            self.record_expr(child, frame)

    def record_test(self, expr: nodes.Node, frame: _Frame) -> None:
        """Record a conditional test; bare chains are booleans."""
        if isinstance(expr, nodes.Not):
            self.record_test(expr.node, frame)
            return
        if isinstance(expr, (nodes.And, nodes.Or)):
            self.record_test(expr.left, frame)
            self.record_test(expr.right, frame)
            return

        chain = field_chain(expr)
        if chain is None:
            self.record_expr(expr, frame)
            return
        if chain == [self.root_name] and not frame.lookup(self.root_name)[0]:
            # truthiness of the root list itself
            return
        self.record(chain, FieldKind.BOOL, frame)

    def record_loop_source(
        self, expr: nodes.Node, frame: _Frame
    ) -> Optional[FieldSchema]:
        """Record the iterable of a loop and return its element schema."""
        # {% for x in items|sort(attribute="name") %} still iterates items
        while isinstance(expr, nodes.Filter) and expr.node is not None:
            for arg in expr.args:
                self.record_expr(arg, frame)
            for kwarg in expr.kwargs:
                self.record_expr(kwarg.value, frame)
            expr = expr.node

        chain = field_chain(expr)
        if chain is None:
            if isinstance(expr, nodes.Call) and isinstance(expr.node, nodes.Getattr):
                receiver = field_chain(expr.node.node)
                if receiver is not None:
                    log.warning(
                        "Loop over '%s.%s()' is not inferred; '%s' is recorded "
                        "as %s",
                        ".".join(receiver),
                        expr.node.attr,
                        ".".join(receiver),
                        FieldKind.STRING.value,
                    )
            self.record_expr(expr, frame)
            return None
        return self.record(chain, FieldKind.LIST, frame)

    def record(
        self, chain: List[str], kind: FieldKind, frame: _Frame
    ) -> Optional[FieldSchema]:
        """Record a field chain whose last segment is used as ``kind``.

        Returns the element schema for ``LIST`` uses, otherwise the leaf
        field, or None when the chain does not reach the schema.
        """
        head, rest = chain[0], chain[1:]

        bound, binding = frame.lookup(head)
        if not bound:
            return self._record_top_level(chain, kind)
        if binding is None:
            return None
        if isinstance(binding, _Alias):
            full = list(binding.chain) + rest
            if binding.element is None:
                return self._record_top_level(full, kind)
            return self._classify_path(binding.element, full, kind, chain)
        return self._classify_path(binding, rest, kind, chain)

    def _record_top_level(
        self, chain: List[str], kind: FieldKind
    ) -> Optional[FieldSchema]:
        head, rest = chain[0], chain[1:]
        if head in self.ignored_names:
            return None

        if head not in self.fields:
            self.fields[head] = FieldSchema(name=head)
        result = self._classify_path(self.fields[head], rest, kind, chain)

        if head == self.root_name and not rest and kind is FieldKind.LIST:
            self.iterates_root = result is not None
        return result

    def _classify_path(
        self,
        target: FieldSchema,
        rest: List[str],
        kind: FieldKind,
        chain: List[str],
    ) -> Optional[FieldSchema]:
        node = target
        for segment in rest:
            if not self._classify(node, FieldKind.NESTED, chain):
                return None
            node = node.child(segment)
        if not self._classify(node, kind, chain):
            return None
        if kind is FieldKind.LIST:
            return node.element
        return node

    def _classify(self, node: FieldSchema, kind: FieldKind, chain: List[str]) -> bool:
        if node.kind is None:
            node.kind = kind
            if kind is FieldKind.LIST:
                node.element = FieldSchema(name=node.name)
            return True
        if node.kind is kind:
            return True
        log.warning(
            "'%s' is used as %s but was first seen as %s; keeping %s",
            ".".join(chain),
            kind.value,
            node.kind.value,
            node.kind.value,
        )
        return False

    # -- bindings -----------------------------------------------------------

    def _bind_target(
        self, target: nodes.Node, element: Optional[FieldSchema], frame: _Frame
    ) -> None:
        if isinstance(target, nodes.Name):
            frame.bindings[target.name] = element
        elif isinstance(target, nodes.Tuple):
            # unpacked items have no field names to infer
            for item in target.items:
                self._bind_target(item, None, frame)

    def _bind_assignment(
        self,
        target: nodes.Node,
        value: nodes.Node,
        value_frame: _Frame,
        bind_frame: _Frame,
    ) -> None:
        chain = field_chain(value)
        if isinstance(target, nodes.Name) and chain is not None:
            # resolved now, so `{% set user = user.profile %}` cannot loop
            bind_frame.bindings[target.name] = self._resolve_alias(chain, value_frame)
            return
        self.record_expr(value, value_frame)
        self._bind_target(target, None, bind_frame)

    def _resolve_alias(self, chain: List[str], frame: _Frame) -> _Binding:
        head, rest = chain[0], tuple(chain[1:])
        bound, binding = frame.lookup(head)
        if not bound:
            return _Alias(tuple(chain))
        if binding is None:
            return None
        if isinstance(binding, _Alias):
            return _Alias(binding.chain + rest, binding.element)
        return _Alias(rest, binding)


def infer_schema(
    template: nodes.Template,
    root_name: str = DEFAULT_ROOT_NAME,
    name: Optional[str] = None,
) -> Schema:
    """Infer the schema of the data ``template`` expects.

    ``name`` identifies the template in warnings.
    """
    return SchemaInferencer(root_name=root_name, name=name).infer(template)
