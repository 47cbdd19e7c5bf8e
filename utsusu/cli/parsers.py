"""CLI argument parsers and validators."""

from __future__ import annotations

import typer


def parse_variable(value: str) -> tuple[str, str]:
    """Parse a variable argument in format NAME=VALUE."""
    if "=" not in value:
        raise typer.BadParameter(f"Must be NAME=VALUE, got: {value!r}")
    name, raw = value.split("=", 1)
    name = name.strip()
    if not name:
        raise typer.BadParameter(f"Variable name must not be empty, got: {value!r}")
    return name, raw


def parse_variables(values: list[str]) -> dict[str, str]:
    """Parse repeated NAME=VALUE arguments; later values win."""
    return dict(map(parse_variable, values))
