"""Utsusu - Configuration-driven template scaffolding.

Renders a directory of Jinja2 template files into a single file or a directory tree,
driven by a per-template ``config.yml``.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
