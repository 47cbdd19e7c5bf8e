"""Interactive prompts for output names and variable values."""

from __future__ import annotations

from typing import Mapping

import typer

from ..core.models import TemplateConfig, TemplateOutputType
from ..rendering.context import VariableSource


def prompt_for_value(label: str, default: str) -> str | None:
    """Prompt for a value, showing the default.

    Returns:
        The trimmed input, or None if the input was blank
    """
    value = typer.prompt(f"{label} [{default}]", default="", show_default=False)
    return value.strip() or None


def prompt_output_name(config: TemplateConfig) -> str | None:
    label = "Output File" if config.output_type == TemplateOutputType.FILE else "Output Directory"
    return prompt_for_value(label, config.output_name)


def variable_source(given: Mapping[str, str], *, interactive: bool) -> VariableSource:
    """Build a variable source from command-line values, prompting for the rest."""

    def source(name: str, default: str) -> str | None:
        if name in given:
            return given[name]
        if not interactive:
            return None
        return prompt_for_value(name, default)

    return source
