"""Main CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ..config.parser import parse_config_from_file
from ..core.errors import (
    RenderPipelineError,
    SetupError,
    TemplateRenderError,
    UtsusuError,
)
from ..core.models import RenderResult, TemplateOutputType
from ..rendering import context, discovery
from ..rendering.dispatch import render_template
from ..settings import (
    default_config_file,
    load_settings,
    load_tool_config,
    resolve_templates_dir,
)
from .parsers import parse_variables
from .prompts import prompt_output_name, variable_source

logger = logging.getLogger(__name__)

TEMPLATE_CONFIG_FILE = "config.yml"
TEMPLATE_FILES_DIR = "files"

app = typer.Typer(
    name="utsusu",
    help="A straightforward template rendering tool.",
)


def _report_failure(exc: UtsusuError, selected: list[Path]) -> None:
    typer.echo(str(exc), err=True)

    if isinstance(exc, TemplateRenderError):
        typer.echo(f"Source file: {exc.path}", err=True)
        typer.echo(f"All template files: {[str(p) for p in selected]}", err=True)
        typer.echo(f"Registered templates: {exc.template_names}", err=True)

    if isinstance(exc, RenderPipelineError) and exc.files_total:
        typer.echo(
            f"{exc.files_written}/{exc.files_total} files written before the failure",
            err=True,
        )


def _report_success(result: RenderResult) -> None:
    if result.output_type == TemplateOutputType.FILE:
        typer.echo(f"Template written to '{result.destination}'")
    else:
        typer.echo(
            f"{result.files_written}/{result.files_total} files written to "
            f"'{result.destination}'"
        )


@app.command()
def render(
    template_name: Annotated[
        str,
        typer.Argument(help="The name of the template to render.", metavar="NAME"),
    ],
    config_file: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to the configuration file to use (env: UTSUSU_CONFIG_FILE).",
            metavar="CONFIG_FILE",
        ),
    ] = None,
    templates_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--templates-dir",
            "-t",
            help="Path to the directory containing templates (env: UTSUSU_TEMPLATES_DIR).",
            metavar="TEMPLATES_DIR",
        ),
    ] = None,
    output: Annotated[
        Optional[str],
        typer.Option(
            "--output",
            "-o",
            help="Output file or directory; skips the output prompt.",
            metavar="PATH",
        ),
    ] = None,
    variables: Annotated[
        list[str],
        typer.Option(
            "--var",
            help="Set template variable NAME to VALUE; skips its prompt. Repeatable.",
            metavar="NAME=VALUE",
        ),
    ] = [],
    no_input: Annotated[
        bool,
        typer.Option(
            "--no-input",
            help="Do not prompt; use defaults for anything not given on the command line.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Render the template NAME from the templates directory."""
    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    given_variables = parse_variables(variables)
    selected: list[Path] = []

    try:
        settings = load_settings()
        tool_config_path = config_file or settings.config_file or default_config_file()
        tool_config = load_tool_config(tool_config_path)
        root = resolve_templates_dir(templates_dir, settings, tool_config, tool_config_path)
        interactive = not (no_input or settings.no_input)

        template_path = root / template_name
        logger.info(f"Template path: {template_path}")
        if not template_path.is_dir():
            raise SetupError(f"Template does not exist at path '{template_path}'")

        # Parse configuration
        template_config_path = template_path / TEMPLATE_CONFIG_FILE
        logger.info(f"Using config file at: {template_config_path}")
        template_config = parse_config_from_file(template_config_path)

        # Select template files before asking the user anything
        files_root = template_path / TEMPLATE_FILES_DIR
        files = discovery.list_template_files(files_root)
        selected = discovery.select_template_files(template_config, files, files_root)
        discovery.check_selection(template_config, selected, files_root)

        # Collect output name and variable values
        output_name = output
        if output_name is None and interactive:
            output_name = prompt_output_name(template_config)

        source = variable_source(given_variables, interactive=interactive)
        overrides = {**given_variables, **context.collect_overrides(template_config, source)}
        bindings = context.resolve_bindings(template_config, overrides)

        # Render templates
        result = render_template(
            template_config,
            files,
            files_root,
            bindings,
            output=output_name,
        )
    except UtsusuError as exc:
        _report_failure(exc, selected)
        raise typer.Exit(code=exc.exit_code) from exc

    _report_success(result)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
