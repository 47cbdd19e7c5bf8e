"""Domain models for template configuration and render results."""

from __future__ import annotations

from enum import Enum
from pathlib import Path, PurePath
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ..config.globs import GlobSet

DEFAULT_OUTPUT_NAME = "rendered"


class TemplateOutputType(str, Enum):
    """What a template produces when rendered."""

    FILE = "file"
    DIRECTORY = "directory"


class FileOutput(BaseModel):
    """Output target of a template that renders a single file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[TemplateOutputType.FILE] = TemplateOutputType.FILE
    filename: str | None = Field(default=None, description="Default output file name")


class DirectoryOutput(BaseModel):
    """Output target of a template that renders a directory tree."""

    model_config = ConfigDict(frozen=True)

    kind: Literal[TemplateOutputType.DIRECTORY] = TemplateOutputType.DIRECTORY
    directory: str | None = Field(default=None, description="Default output directory name")


OutputTarget = Union[FileOutput, DirectoryOutput]


class TemplateConfig:
    """Validated configuration of a single template.

    Instances start empty and are populated by the configuration parser through the
    mutators below. Once parsed, a configuration is treated as read-only.
    """

    def __init__(self) -> None:
        self._included_file_patterns = GlobSet.empty()
        self._variables: dict[str, str] = {}
        self._output: OutputTarget = FileOutput()

    # -- Queries -----------------------------------------------------------

    @property
    def output(self) -> OutputTarget:
        return self._output

    @property
    def output_type(self) -> TemplateOutputType:
        return self._output.kind

    @property
    def output_filename(self) -> str | None:
        return self._output.filename if isinstance(self._output, FileOutput) else None

    @property
    def output_directory(self) -> str | None:
        return self._output.directory if isinstance(self._output, DirectoryOutput) else None

    @property
    def output_name(self) -> str:
        """The configured output file or directory name for the current mode."""
        if isinstance(self._output, FileOutput):
            name = self._output.filename
        else:
            name = self._output.directory
        return name if name is not None else DEFAULT_OUTPUT_NAME

    @property
    def included_file_patterns(self) -> GlobSet:
        return self._included_file_patterns

    def should_include(self, relative_path: str | PurePath) -> bool:
        """Return whether a path, relative to the template files root, is rendered."""
        return self._included_file_patterns.is_match(relative_path)

    def variable_items(self) -> list[tuple[str, str]]:
        """Return a snapshot of all (name, default) variable pairs."""
        return list(self._variables.items())

    def render_bindings(self) -> dict[str, str]:
        """Return every declared variable bound to its default value."""
        return dict(self._variables)

    # -- Mutators (parser only) --------------------------------------------

    def set_output_type(self, output_type: TemplateOutputType) -> None:
        """Switch the output mode, discarding the name of the previous mode."""
        output_type = TemplateOutputType(output_type)
        if output_type == self._output.kind:
            return
        if output_type is TemplateOutputType.FILE:
            self._output = FileOutput()
        else:
            self._output = DirectoryOutput()

    def set_output_filename(self, filename: str) -> None:
        """Set the default output file name; ignored unless in file mode."""
        if isinstance(self._output, FileOutput):
            self._output = FileOutput(filename=filename)

    def set_output_directory(self, directory: str) -> None:
        """Set the default output directory name; ignored unless in directory mode."""
        if isinstance(self._output, DirectoryOutput):
            self._output = DirectoryOutput(directory=directory)

    def update_included_file_patterns(self, patterns: GlobSet) -> None:
        self._included_file_patterns = patterns

    def add_variable(self, name: str, default: str) -> str | None:
        """Add or update a variable default, returning the previous default if any."""
        previous = self._variables.get(name)
        self._variables[name] = default
        return previous

    def __repr__(self) -> str:
        return (
            f"TemplateConfig(output={self._output!r}, "
            f"include={self._included_file_patterns!r}, variables={self._variables!r})"
        )


class RenderResult(BaseModel):
    """Outcome of a successful render."""

    output_type: TemplateOutputType = Field(..., description="Mode the template rendered in")
    destination: Path = Field(..., description="Rendered file or output directory")
    files_written: int = Field(..., ge=0, description="Number of files written")
    files_total: int = Field(..., ge=0, description="Number of files selected for rendering")
