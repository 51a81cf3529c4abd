"""Generate command - compile templates into render binding modules"""

from __future__ import annotations

import glob
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from qen.compiler import generate
from qen.config import QenConfig
from qen.exceptions import QenError

log = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Outcome of generating one template."""

    template: Path
    output: Path
    source: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def template_id(template: Path) -> str:
    """Logical template name: the file name up to its first dot.

    ``todo_list.html.j2`` -> ``todo_list``
    """
    return template.name.split(".", 1)[0]


def output_path(template: Path, suffix: str = ".py") -> Path:
    """Module the bindings of ``template`` are written to, beside it."""
    return template.with_name(template_id(template) + suffix)


def default_namespace(output: Path) -> str:
    """Package name of a generated module: its directory's name."""
    return output.resolve().parent.name


def expand_patterns(patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns into template files, in a stable order."""
    found: dict[Path, None] = {}
    for pattern in patterns:
        for match in sorted(glob.glob(pattern, recursive=True)):
            path = Path(match)
            if path.is_file():
                found.setdefault(path, None)
    return list(found)


def generate_one(
    template: Path,
    config: QenConfig,
    write: bool = True,
) -> GenerateResult:
    """Generate bindings for one template.

    Failures are captured in the result so one bad template never stops
    the others.
    """
    output = output_path(template, config.output_suffix)
    try:
        if output.resolve() == template.resolve():
            raise QenError(f"output {output} would overwrite the template")

        source = template.read_text(encoding="utf-8")
        relative = os.path.relpath(template.resolve(), output.resolve().parent)
        code = generate(
            source,
            template_id=template_id(template),
            template_path=relative,
            namespace=config.namespace or default_namespace(output),
            config=config,
        )

        if write:
            output.write_text(code, encoding="utf-8")
    except (QenError, OSError, UnicodeDecodeError) as exc:
        log.debug("Failed to generate %s", template, exc_info=True)
        return GenerateResult(template=template, output=output, error=exc)

    log.info("Generated %s from %s", output, template)
    return GenerateResult(template=template, output=output, source=code)


def generate_all(
    templates: Iterable[Path],
    config: QenConfig,
    write: bool = True,
    jobs: int = 1,
) -> list[GenerateResult]:
    """Generate bindings for every template; results keep the input order."""
    templates = list(templates)
    if jobs <= 1 or len(templates) <= 1:
        return [generate_one(t, config, write) for t in templates]

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        return list(pool.map(lambda t: generate_one(t, config, write), templates))
