"""Renderer - converts GeneratedModule IR to Python source text."""

import json
from pathlib import PurePath
from typing import List

from qen.compiler.spec import GeneratedModule, ModelClass, RenderFunction


def _literal(value: str) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(value, ensure_ascii=False)


class Renderer:
    """Renders GeneratedModule IR to Python source."""

    def render(self, module: GeneratedModule) -> str:
        """Render a GeneratedModule to importable Python source.

        Args:
            module: The GeneratedModule IR to render.

        Returns:
            Complete module source ending in a newline.
        """
        header = [
            self._render_docstring(module),
            self._render_imports(module),
            f"__all__ = [{', '.join(_literal(name) for name in module.exports)}]",
        ]
        if module.function is not None:
            header.append(self._render_template_path(module.function))

        parts = ["\n\n".join(header)]

        # Models come in dependency order, so every reference is already defined
        for model in module.models:
            parts.append(self._render_model(model))

        if module.function is not None:
            parts.append(f"_INPUT = TypeAdapter({module.function.param_annotation})")
            parts.append(self._render_function(module.function, module.template_name))

        return "\n\n\n".join(parts) + "\n"

    def _render_docstring(self, module: GeneratedModule) -> str:
        return (
            f'"""Render bindings for {module.template_name} '
            f"in package {module.namespace}.\n\n{module.notice}\n" + '"""'
        )

    def _render_imports(self, module: GeneratedModule) -> str:
        pydantic_names = ["TypeAdapter"]
        if module.models:
            pydantic_names.append("BaseModel")
        if any(model.has_aliases for model in module.models):
            pydantic_names.extend(["ConfigDict", "Field"])

        lines = ["from __future__ import annotations", ""]
        if module.function is not None:
            lines.extend(["from pathlib import Path", ""])
        lines.append(f"from pydantic import {', '.join(sorted(pydantic_names))}")
        if module.function is not None:
            lines.extend(["", "from qen.runtime import execute, load_template"])
        return "\n".join(lines)

    def _render_template_path(self, fn: RenderFunction) -> str:
        if PurePath(fn.template_path).is_absolute():
            return f"_TEMPLATE_PATH = Path({_literal(fn.template_path)})"
        return f"_TEMPLATE_PATH = Path(__file__).parent / {_literal(fn.template_path)}"

    def _render_model(self, model: ModelClass) -> str:
        """Render a single pydantic model class.

        Fields whose template name is not a usable attribute are declared
        with an alias, and the model accepts either spelling.
        """
        lines: List[str] = [f"class {model.name}(BaseModel):"]
        body: List[str] = []

        if model.path:
            body.append(f'    """Fields of ``{model.path}``."""')
            body.append("")
        if model.has_aliases:
            body.append("    model_config = ConfigDict(populate_by_name=True)")
            body.append("")

        for f in model.fields:
            if f.alias:
                body.append(f"    {f.name}: {f.annotation} = Field(alias={_literal(f.alias)})")
            else:
                body.append(f"    {f.name}: {f.annotation}")

        while body and body[-1] == "":
            body.pop()
        if not body:
            body.append("    pass")

        lines.extend(body)
        return "\n".join(lines)

    def _render_function(self, fn: RenderFunction, template_name: str) -> str:
        call = "execute(template, _INPUT, data)"
        if fn.root_name is not None:
            call = f"execute(template, _INPUT, data, root_name={_literal(fn.root_name)})"

        return "\n".join(
            [
                f"def {fn.name}(data: {fn.param_annotation}) -> str:",
                f'    """Render ``{template_name}`` with ``data``.',
                "",
                "    Raises:",
                "        TemplateLoadError: If the template cannot be read or parsed.",
                "        TemplateExecutionError: If ``data`` does not fit or rendering fails.",
                '    """',
                "    template = load_template(_TEMPLATE_PATH)",
                f"    return {call}",
            ]
        )
