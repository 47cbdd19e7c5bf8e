"""Render dispatch for file and directory templates."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Sequence

from ..core.errors import RenderPipelineError
from ..core.models import RenderResult, TemplateConfig, TemplateOutputType
from .discovery import check_selection, relative_template_path, select_template_files
from .engine import JinjaTemplateEngine, LoadedTemplates, TemplateEngine, template_name
from .io import create_output_directory, write_rendered_file

logger = logging.getLogger(__name__)


def render_file(
    templates: LoadedTemplates,
    source: Path,
    files_root: Path,
    bindings: Mapping[str, str],
    output_path: Path,
) -> RenderResult:
    """Render a single template file to ``output_path``."""
    rendered = templates.render(template_name(source, files_root), bindings)
    write_rendered_file(output_path, rendered)

    logger.info(f"Rendered {source} → {output_path}")
    return RenderResult(
        output_type=TemplateOutputType.FILE,
        destination=output_path,
        files_written=1,
        files_total=1,
    )


def render_directory(
    templates: LoadedTemplates,
    sources: Sequence[Path],
    files_root: Path,
    bindings: Mapping[str, str],
    output_dir: Path,
) -> RenderResult:
    """Render every template file into a new output directory.

    Files keep their path relative to ``files_root``. The first failure aborts the render;
    files written before it are left in place and counted on the raised error.
    """
    total = len(sources)
    written = 0
    try:
        create_output_directory(output_dir)
        for source in sources:
            output_path = output_dir / relative_template_path(source, files_root)
            rendered = templates.render(template_name(source, files_root), bindings)
            write_rendered_file(output_path, rendered)
            written += 1
            logger.debug(f"Rendered {source} → {output_path}")
    except RenderPipelineError as exc:
        exc.with_progress(written, total)
        raise

    logger.info(f"Rendered {written}/{total} file(s) into {output_dir}")
    return RenderResult(
        output_type=TemplateOutputType.DIRECTORY,
        destination=output_dir,
        files_written=written,
        files_total=total,
    )


def render_template(
    config: TemplateConfig,
    files: Sequence[Path],
    files_root: Path,
    bindings: Mapping[str, str],
    *,
    engine: TemplateEngine | None = None,
    output: str | Path | None = None,
) -> RenderResult:
    """Render a template in the mode its configuration declares.

    Args:
        config: Parsed template configuration
        files: Enumerated files under ``files_root``
        files_root: Root the include globs are matched against
        bindings: Resolved variable bindings
        engine: Template engine; Jinja2 when omitted
        output: Output file or directory overriding the configured name

    Returns:
        Destination and file counts of the render

    Raises:
        NoMatchingFilesError: If no file is selected
        TooManyMatchingFilesError: If a file template selects several files
        TemplateLoadError: If the selected files cannot be loaded
        TemplateRenderError: If a template fails to render
        OutputWriteError: If a rendered file cannot be written
        OutputDirectoryError: If the output directory cannot be created
    """
    selected = select_template_files(config, files, files_root)
    check_selection(config, selected, files_root)

    engine = engine or JinjaTemplateEngine()
    templates = engine.load(selected, files_root)

    destination = Path(output) if output else Path(config.output_name)

    if config.output_type == TemplateOutputType.FILE:
        return render_file(templates, selected[0], files_root, bindings, destination)

    return render_directory(templates, selected, files_root, bindings, destination)
