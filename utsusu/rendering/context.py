"""Variable binding resolution."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from ..core.models import TemplateConfig

logger = logging.getLogger(__name__)

# Supplies an override for a declared variable, or None to keep the default.
VariableSource = Callable[[str, str], Optional[str]]


def collect_overrides(config: TemplateConfig, source: VariableSource) -> dict[str, str]:
    """Ask a variable source for a value for every declared variable.

    Args:
        config: Template configuration declaring the variables
        source: Called with (name, default); returns the override or None

    Returns:
        Only the variables the source chose to override
    """
    overrides: dict[str, str] = {}
    for name, default in config.variable_items():
        value = source(name, default)
        if value is not None:
            overrides[name] = value
    return overrides


def resolve_bindings(
    config: TemplateConfig, overrides: Mapping[str, str] | None = None
) -> dict[str, str]:
    """Merge variable defaults with caller overrides.

    Overrides for names the template does not declare are kept as-is.

    Args:
        config: Template configuration providing defaults
        overrides: Values that replace the defaults

    Returns:
        Final name to value bindings used for rendering
    """
    bindings = config.render_bindings()
    for name, value in (overrides or {}).items():
        bindings[name] = value

    logger.debug(f"Resolved {len(bindings)} variable binding(s)")
    return bindings
