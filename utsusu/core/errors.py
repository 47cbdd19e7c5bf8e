"""Error taxonomy for configuration, selection, rendering and output failures.

Every error carries an ``exit_code`` so the CLI can report each failure class with a
distinct process status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence


class UtsusuError(Exception):
    """Base class for every failure surfaced by the render pipeline."""

    exit_code: int = 1


class SetupError(UtsusuError):
    """Raised when the templates directory, template or tool settings cannot be resolved."""

    exit_code = 1


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class ConfigReadError(UtsusuError):
    """Raised when a template configuration document cannot be read."""

    exit_code = 3

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read configuration file '{path}': {cause}")


class ConfigParseError(UtsusuError):
    """Raised when a configuration document violates the template schema.

    Each schema violation is a dedicated subclass; the set is closed.
    """

    exit_code = 4
    message = "Invalid template configuration"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class YamlParseError(ConfigParseError):
    message = "Configuration is not valid YAML"


class ConfigMustBeAMapping(ConfigParseError):
    message = "Configuration document must be a mapping"


class NoOutputType(ConfigParseError):
    message = "Missing required key 'type' (expected 'file' or 'directory')"


class InvalidOutputType(ConfigParseError):
    message = "Key 'type' must be 'file' or 'directory'"


class NoOutputConfig(ConfigParseError):
    message = "Missing required key 'output'"


class OutputConfigMustBeAMapping(ConfigParseError):
    message = "Key 'output' must be a mapping"


class NoOutputFilename(ConfigParseError):
    message = "Missing required key 'output.filename' for a 'file' template"


class InvalidOutputFilename(ConfigParseError):
    message = "Key 'output.filename' must be a string"


class NoOutputDirectory(ConfigParseError):
    message = "Missing required key 'output.directory' for a 'directory' template"


class InvalidOutputDirectory(ConfigParseError):
    message = "Key 'output.directory' must be a string"


class NoIncludedFiles(ConfigParseError):
    message = "Missing required key 'include'"


class InvalidIncludedFiles(ConfigParseError):
    message = "Key 'include' must be a glob string or a list of glob strings"


class TooManyIncludedFileGlobs(ConfigParseError):
    message = "A 'file' template must include exactly one glob"


class IncludedFileGlobMustBeString(ConfigParseError):
    message = "Every entry of 'include' must be a string"


class IncludedFileGlobParseError(ConfigParseError):
    message = "Invalid glob in 'include'"

    def __init__(self, pattern: str | None, kind: str) -> None:
        self.pattern = pattern
        self.kind = kind
        where = f" {pattern!r}" if pattern is not None else ""
        super().__init__(f"{self.message}{where}: {kind}")


class VariablesMustBeAMapping(ConfigParseError):
    message = "Key 'variables' must be a mapping"


class VariableNameMustBeAString(ConfigParseError):
    message = "Variable names in 'variables' must be strings"


class VariableDefaultMustBeAScalar(ConfigParseError):
    message = "Variable defaults must be scalars (string, number, boolean or null)"


# ---------------------------------------------------------------------------
# Enumeration and selection errors
# ---------------------------------------------------------------------------


class FileEnumerationError(UtsusuError):
    """Raised when the template files directory cannot be traversed."""

    exit_code = 5

    def __init__(self, root: Path, cause: OSError) -> None:
        self.root = root
        self.cause = cause
        super().__init__(f"Error reading template files under '{root}': {cause}")


class TooManyMatchingFilesError(UtsusuError):
    """Raised when a 'file' template selects more than one file."""

    exit_code = 6

    def __init__(self, paths: Sequence[Path]) -> None:
        self.paths = list(paths)
        super().__init__(
            f"Cannot render {len(self.paths)} files for a 'file' type template. "
            "Adjust your included files glob to match a single file."
        )


class NoMatchingFilesError(UtsusuError):
    """Raised when the include globs select no template files."""

    exit_code = 8

    def __init__(self, root: Path) -> None:
        self.root = root
        super().__init__(
            f"No matching template files to render under '{root}'. "
            "Adjust your included files glob to match at least one file."
        )


# ---------------------------------------------------------------------------
# Rendering and output errors
# ---------------------------------------------------------------------------


class RenderPipelineError(UtsusuError):
    """Base for failures after file selection; tracks directory-mode progress."""

    files_written: int = 0
    files_total: int = 0

    def with_progress(self, written: int, total: int) -> RenderPipelineError:
        self.files_written = written
        self.files_total = total
        return self


class TemplateLoadError(RenderPipelineError):
    exit_code = 7

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error loading template file '{path}': {cause}")


class TemplateRenderError(RenderPipelineError):
    exit_code = 9

    def __init__(self, path: Path, template_names: Sequence[str], cause: Exception) -> None:
        self.path = path
        self.template_names = list(template_names)
        self.cause = cause
        super().__init__(f"Error rendering template file '{path}': {cause}")


class OutputWriteError(RenderPipelineError):
    exit_code = 10

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error writing rendered file '{path}': {cause}")


class OutputDirectoryError(RenderPipelineError):
    exit_code = 11

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error creating output directory '{path}': {cause}")
