"""Qen Compiler - turns templates into typed render bindings."""

from typing import Optional

from qen.compiler.compiler import Compiler
from qen.compiler.naming import NameSynthesizer
from qen.compiler.renderer import Renderer
from qen.compiler.spec import GeneratedModule, ModelClass, ModelField, RenderFunction
from qen.config import QenConfig


def generate(
    source: str,
    *,
    template_id: str,
    template_path: str,
    namespace: str,
    config: Optional[QenConfig] = None,
) -> str:
    """Generate the Python source of the render bindings for one template.

    Performs no file I/O; the caller decides where the result goes.
    """
    module = Compiler(config).compile(
        source,
        template_id=template_id,
        template_path=template_path,
        namespace=namespace,
    )
    return Renderer().render(module)


__all__ = [
    "Compiler",
    "GeneratedModule",
    "ModelClass",
    "ModelField",
    "NameSynthesizer",
    "RenderFunction",
    "Renderer",
    "generate",
]
