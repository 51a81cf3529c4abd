"""Compiler - transforms template source into GeneratedModule IR."""

from __future__ import annotations

import logging
import warnings
from pathlib import PurePath
from typing import Dict, List, Optional

from qen.ast.parser import Parser
from qen.compiler.naming import (
    NameSynthesizer,
    TypePath,
    attribute_name,
    innermost,
    render_function_name,
    template_type_name,
)
from qen.compiler.spec import GeneratedModule, ModelClass, ModelField, RenderFunction
from qen.config import QenConfig
from qen.exceptions import NameCollisionError
from qen.schema.inferencer import infer_schema
from qen.schema.spec import FieldKind, FieldSchema, Schema

log = logging.getLogger(__name__)


class Compiler:
    """Compiles one template to a GeneratedModule IR."""

    def __init__(self, config: Optional[QenConfig] = None, parser: Optional[Parser] = None):
        """Initialize compiler with optional configuration.

        Args:
            config: Naming and root-list settings. Defaults to ``QenConfig()``.
            parser: Template parser. Defaults to a Jinja2 parser.
        """
        self.config = config or QenConfig()
        self.parser = parser or Parser()

    def compile(
        self,
        source: str,
        *,
        template_id: str,
        template_path: str,
        namespace: str,
        template_name: Optional[str] = None,
    ) -> GeneratedModule:
        """Compile template source into a GeneratedModule IR.

        Algorithm:
        1. Parse the template into a Jinja2 AST
        2. Infer the schema of the data it expects
        3. Synthesize class names for nested nodes
        4. Emit model classes, dependencies first
        5. Emit the render function bound to the root type

        Args:
            source: Template source text.
            template_id: Logical template name, e.g. ``todo_list``.
            template_path: Template location as the generated module should
                load it (relative paths are relative to that module).
            namespace: Package the module is generated into.
            template_name: Name used in messages. Defaults to the file name
                of ``template_path``.

        Returns:
            GeneratedModule IR ready for rendering to text.

        Raises:
            ParseError: If the template has a syntax error.
            NameCollisionError: If two fields synthesize the same name.
        """
        template_name = template_name or PurePath(template_path).name

        tree = self.parser.parse(source, name=template_name)
        schema = infer_schema(tree, root_name=self.config.root_name, name=template_name)
        for warning in schema.warnings:
            # reported against the template, once per template
            warnings.warn_explicit(
                warning,
                type(warning),
                filename=template_path,
                lineno=warning.lineno or 0,
            )

        root_type = template_type_name(template_id, self.config.type_suffix)
        element_type = template_type_name(template_id, self.config.element_suffix)
        names = NameSynthesizer(root_type, element_type).synthesize(schema)

        models = self.emit_models(schema, names)
        function = self.emit_render_function(schema, names, template_id, template_path)

        log.info(
            "Compiled %s: %d model(s), entry point %s",
            template_name,
            len(models),
            function.name,
        )
        return GeneratedModule(
            template_name=template_name,
            namespace=namespace,
            models=models,
            function=function,
        )

    def emit_models(self, schema: Schema, names: Dict[TypePath, str]) -> List[ModelClass]:
        """Emit one model class per nested node; the top-level class comes last."""
        models: List[ModelClass] = []
        if schema.root_list:
            if schema.element is not None:
                element = innermost(schema.element)
                if element.kind is FieldKind.NESTED:
                    self._emit_model(names[()], element.children, (), names, models)
        else:
            self._emit_model(names[()], schema.fields, (), names, models)
        return models

    def _emit_model(
        self,
        name: str,
        members: Dict[str, FieldSchema],
        path: TypePath,
        names: Dict[TypePath, str],
        out: List[ModelClass],
    ) -> None:
        fields: List[ModelField] = []
        owners: Dict[str, TypePath] = {}

        for member in members.values():
            member_path = path + (member.name,)
            if innermost(member).kind is FieldKind.NESTED:
                self._emit_model(
                    names[member_path],
                    innermost(member).children,
                    member_path,
                    names,
                    out,
                )

            attr = attribute_name(member.name)
            if attr in owners:
                raise NameCollisionError(attr, owners[attr], member_path)
            owners[attr] = member_path

            fields.append(
                ModelField(
                    name=attr,
                    annotation=self._annotation(member, member_path, names),
                    alias=member.name if attr != member.name else None,
                )
            )

        out.append(ModelClass(name=name, fields=fields, path=".".join(path)))

    def _annotation(
        self, f: FieldSchema, path: TypePath, names: Dict[TypePath, str]
    ) -> str:
        if f.kind is FieldKind.STRING:
            return "str"
        if f.kind is FieldKind.BOOL:
            return "bool"
        if f.kind is FieldKind.LIST:
            if f.element is None:
                raise ValueError(
                    f"List field '{f.name}' has no element; finalize the schema first"
                )
            return f"list[{self._annotation(f.element, path, names)}]"
        if f.kind is FieldKind.NESTED:
            return names[path]
        raise ValueError(f"Field '{f.name}' has no kind; finalize the schema first")

    def emit_render_function(
        self,
        schema: Schema,
        names: Dict[TypePath, str],
        template_id: str,
        template_path: str,
    ) -> RenderFunction:
        """Emit the entry point taking the root model (or a list of elements)."""
        root_name: Optional[str] = None
        if schema.root_list:
            if schema.element is None:
                raise ValueError("Root-list schema has no element")
            param = f"list[{self._annotation(schema.element, (), names)}]"
            root_name = self.config.root_name
        else:
            param = names[()]

        return RenderFunction(
            name=render_function_name(template_id, self.config.function_prefix),
            param_annotation=param,
            template_path=PurePath(template_path).as_posix(),
            root_name=root_name,
        )
