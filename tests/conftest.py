import importlib.util
import logging
import sys

import pytest

from qen.compiler import generate


@pytest.fixture(autouse=True)
def reset_qen_logging():
    """Undo the CLI's logging setup so caplog sees qen records."""
    yield
    logging.captureWarnings(False)
    for name in ("qen", "py.warnings"):
        logger = logging.getLogger(name)
        logger.handlers = []
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def build_module(tmp_path):
    """Write a template and its generated bindings to tmp_path, then import them."""
    module_names = []

    def build(name, source, **kwargs):
        template = tmp_path / f"{name}.html"
        template.write_text(source)

        code = generate(
            source,
            template_id=name,
            template_path=template.name,
            namespace=tmp_path.name,
            **kwargs,
        )
        module_path = tmp_path / f"{name}.py"
        module_path.write_text(code)

        module_name = f"generated_{name}"
        spec = importlib.util.spec_from_file_location(module_name, module_path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        module_names.append(module_name)
        spec.loader.exec_module(module)
        return module

    yield build

    for module_name in module_names:
        sys.modules.pop(module_name, None)
