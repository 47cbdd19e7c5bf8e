"""Template engine port and its Jinja2 implementation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError

from ..core.errors import TemplateLoadError, TemplateRenderError
from .discovery import relative_template_path

logger = logging.getLogger(__name__)


class LoadedTemplates(Protocol):
    """A set of templates ready to render, keyed by name."""

    @property
    def names(self) -> list[str]: ...

    def render(self, name: str, bindings: Mapping[str, str]) -> str: ...


class TemplateEngine(Protocol):
    """Loads template files into a renderable set."""

    def load(self, paths: Sequence[Path], root: Path) -> LoadedTemplates: ...


def template_name(path: Path, root: Path) -> str:
    """Name under which a template file is registered: its POSIX path below root."""
    return relative_template_path(path, root).as_posix()


def create_environment(sources: Mapping[str, str]) -> Environment:
    """Create the Jinja2 environment used for every render."""
    return Environment(
        loader=DictLoader(dict(sources)),
        undefined=StrictUndefined,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class JinjaTemplates:
    """Templates compiled into one Jinja2 environment.

    Templates can ``{% include %}`` or ``{% extends %}`` each other by name, but only
    files that were loaded are visible.
    """

    def __init__(self, environment: Environment, paths: Mapping[str, Path]) -> None:
        self._environment = environment
        self._paths = dict(paths)

    @property
    def names(self) -> list[str]:
        return sorted(self._paths)

    def render(self, name: str, bindings: Mapping[str, str]) -> str:
        path = self._paths.get(name, Path(name))
        try:
            return self._environment.get_template(name).render(dict(bindings))
        except Exception as exc:
            # Jinja2 errors and Python errors raised by expressions such as {{ 1 / 0 }}
            raise TemplateRenderError(path, self.names, exc) from exc


class JinjaTemplateEngine:
    """Template engine backed by Jinja2."""

    def load(self, paths: Sequence[Path], root: Path) -> JinjaTemplates:
        """Read and compile template files.

        Args:
            paths: Template files to load
            root: Files root; template names are relative to it

        Returns:
            Compiled templates

        Raises:
            TemplateLoadError: If a file cannot be read or has a syntax error
        """
        sources: dict[str, str] = {}
        names: dict[str, Path] = {}
        for path in paths:
            name = template_name(path, root)
            try:
                sources[name] = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise TemplateLoadError(path, exc) from exc
            names[name] = path

        environment = create_environment(sources)
        for name, path in names.items():
            try:
                environment.get_template(name)
            except TemplateError as exc:
                raise TemplateLoadError(path, exc) from exc

        logger.debug(f"Loaded {len(names)} template(s): {sorted(names)}")
        return JinjaTemplates(environment, names)
