"""Qen CLI Main Entry Point

Qen - typed render bindings for Jinja2 templates.
Each template gets a Python module beside it holding pydantic models for the
data it uses and a render function taking those models.

Usage:
    qen 'templates/*.html'             # Generate templates/<name>.py per template
    qen 'templates/**/*.j2' -n views   # Override the package name
    qen page.html --dry-run            # Print instead of writing
    qen --version                      # Show version
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from qen._version import __version__
from qen.commands import expand_patterns, generate_all, setup_logging
from qen.config import load_config
from qen.exceptions import ConfigError

typer_app = typer.Typer(add_completion=False)


@typer_app.command()
def cli(
    patterns: Optional[List[str]] = typer.Argument(
        None, help="Glob patterns of templates to generate bindings for."
    ),
    namespace: Optional[str] = typer.Option(
        None,
        "-n",
        "--namespace",
        help="Package name for generated modules (default: their directory name).",
    ),
    root_name: Optional[str] = typer.Option(
        None, "--root-name", help="Variable a template iterates to take a list."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "-c", "--config", help="Path to qen.yaml."
    ),
    jobs: int = typer.Option(1, "-j", "--jobs", min=1, help="Templates to generate in parallel."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print generated code without writing files."
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show progress."),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Generate typed render functions from Jinja2 templates.

    Examples:
        qen 'templates/*.html'              Generate beside each template
        qen 'templates/*.html' --dry-run    Print the generated code
        qen 'emails/**/*.j2' -n emails      Set the package name
    """
    if version:
        typer.echo(f"qen {__version__}")
        raise typer.Exit()

    setup_logging(verbose)

    if not patterns:
        typer.secho("Please provide a glob pattern as an argument", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        config = load_config(config_path).merged(root_name=root_name, namespace=namespace)
    except ConfigError as exc:
        typer.secho(f"Error: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    templates = expand_patterns(patterns)
    if not templates:
        typer.secho(
            "No files found matching the glob pattern", err=True, fg=typer.colors.RED
        )
        raise typer.Exit(code=1)

    results = generate_all(templates, config, write=not dry_run, jobs=jobs)

    failed = 0
    for result in results:
        if not result.ok:
            failed += 1
            typer.secho(
                f"Error generating bindings for {result.template}: {result.error}",
                err=True,
                fg=typer.colors.RED,
            )
        elif dry_run:
            typer.echo(f"# {result.output}")
            typer.echo(result.source)
        else:
            typer.echo(f"Generated {result.output}")

    if failed:
        raise typer.Exit(code=1)


def app(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    ``argv`` defaults to ``sys.argv[1:]``.
    """
    typer_app(args=argv)


if __name__ == "__main__":
    app()
