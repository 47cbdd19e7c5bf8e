"""Parsing of template ``config.yml`` documents into ``TemplateConfig``.

Example document::

    type: directory
    output:
      directory: my-project
    include:
      - "*.md"
      - "src/**"
    variables:
      project_name: my-project
      license: MIT
"""

from __future__ import annotations

import datetime as dt
import logging
import math
import re
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from ..core import errors
from ..core.models import TemplateConfig, TemplateOutputType
from .globs import GlobError, GlobSet

logger = logging.getLogger(__name__)

CONFIG_KEY_OUTPUT_TYPE = "type"
CONFIG_KEY_OUTPUT = "output"
CONFIG_KEY_OUTPUT_FILENAME = "filename"
CONFIG_KEY_OUTPUT_DIRECTORY = "directory"
CONFIG_KEY_INCLUDED_FILES = "include"
CONFIG_KEY_VARIABLES = "variables"

_MISSING = object()

_BOOL_TAG = "tag:yaml.org,2002:bool"
_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_VALUE_TAG = "tag:yaml.org,2002:value"


class CoreSchemaLoader(yaml.SafeLoader):
    """Safe loader that resolves plain scalars by the YAML 1.2 core schema.

    PyYAML follows YAML 1.1, where ``NO`` is a boolean, ``0755`` is octal and ``1:30``
    is a base-60 number. With this loader only ``true`` and ``false`` are booleans.
    Numbers with a leading zero, base-60 numbers and timestamps stay strings.
    """


CoreSchemaLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp)
        for tag, regexp in resolvers
        if tag not in (_BOOL_TAG, _INT_TAG, _FLOAT_TAG, _TIMESTAMP_TAG, _VALUE_TAG)
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CoreSchemaLoader.add_implicit_resolver(
    _BOOL_TAG,
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)
CoreSchemaLoader.add_implicit_resolver(
    _INT_TAG,
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9]*)|0o[0-7]+|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)
CoreSchemaLoader.add_implicit_resolver(
    _FLOAT_TAG,
    re.compile(
        r"""^(?:[-+]?(?:\.[0-9]+|(?:0|[1-9][0-9]*)(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?
        |[-+]?\.(?:inf|Inf|INF)
        |\.(?:nan|NaN|NAN))$""",
        re.X,
    ),
    list("-+0123456789."),
)


def _parse_output_type(mapping: dict[Any, Any]) -> TemplateOutputType:
    value = mapping.get(CONFIG_KEY_OUTPUT_TYPE, _MISSING)
    if value is _MISSING:
        raise errors.NoOutputType()
    if isinstance(value, str) and value == "file":
        return TemplateOutputType.FILE
    if isinstance(value, str) and value == "directory":
        return TemplateOutputType.DIRECTORY
    raise errors.InvalidOutputType(
        f"{errors.InvalidOutputType.message}, got {value!r}"
    )


def _parse_output(
    config: TemplateConfig, mapping: dict[Any, Any], output_type: TemplateOutputType
) -> None:
    output = mapping.get(CONFIG_KEY_OUTPUT, _MISSING)
    if output is _MISSING:
        raise errors.NoOutputConfig()
    if not isinstance(output, dict):
        raise errors.OutputConfigMustBeAMapping()

    if output_type is TemplateOutputType.FILE:
        filename = output.get(CONFIG_KEY_OUTPUT_FILENAME, _MISSING)
        if filename is _MISSING:
            raise errors.NoOutputFilename()
        if not isinstance(filename, str):
            raise errors.InvalidOutputFilename()
        config.set_output_filename(filename)
    else:
        directory = output.get(CONFIG_KEY_OUTPUT_DIRECTORY, _MISSING)
        if directory is _MISSING:
            raise errors.NoOutputDirectory()
        if not isinstance(directory, str):
            raise errors.InvalidOutputDirectory()
        config.set_output_directory(directory)


def _add_glob(globs: GlobSet, pattern: str) -> None:
    try:
        globs.add(pattern)
    except GlobError as exc:
        raise errors.IncludedFileGlobParseError(exc.pattern, exc.kind) from exc


def _parse_included_files(
    config: TemplateConfig, mapping: dict[Any, Any], output_type: TemplateOutputType
) -> None:
    included = mapping.get(CONFIG_KEY_INCLUDED_FILES, _MISSING)
    if included is _MISSING:
        raise errors.NoIncludedFiles()

    globs = GlobSet.empty()
    if isinstance(included, str):
        _add_glob(globs, included)
    elif isinstance(included, list):
        # A file template renders exactly one file, so it takes exactly one glob
        if output_type is TemplateOutputType.FILE and len(included) > 1:
            raise errors.TooManyIncludedFileGlobs(
                f"{errors.TooManyIncludedFileGlobs.message}, got {len(included)}"
            )
        for entry in included:
            if not isinstance(entry, str):
                raise errors.IncludedFileGlobMustBeString(
                    f"{errors.IncludedFileGlobMustBeString.message}, got {entry!r}"
                )
            _add_glob(globs, entry)
    else:
        raise errors.InvalidIncludedFiles()

    config.update_included_file_patterns(globs)


def scalar_to_string(value: Any) -> str:
    """Convert a YAML scalar to the string used as a variable default.

    Raises:
        TypeError: If the value is not a scalar
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        # Positional notation: 1e-07 renders as 0.0000001
        number = Decimal(repr(value))
        if value.is_integer():
            number = number.to_integral_value()
        return format(number, "f")
    if isinstance(value, str):
        return value
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    raise TypeError(f"Not a scalar: {value!r}")


def _parse_variables(config: TemplateConfig, mapping: dict[Any, Any]) -> None:
    variables = mapping.get(CONFIG_KEY_VARIABLES, _MISSING)
    if variables is _MISSING:
        return
    if not isinstance(variables, dict):
        raise errors.VariablesMustBeAMapping()

    for name, default in variables.items():
        if not isinstance(name, str):
            raise errors.VariableNameMustBeAString(
                f"{errors.VariableNameMustBeAString.message}, got {name!r}"
            )
        try:
            default_text = scalar_to_string(default)
        except TypeError as exc:
            raise errors.VariableDefaultMustBeAScalar(
                f"{errors.VariableDefaultMustBeAScalar.message}; '{name}' is not"
            ) from exc
        config.add_variable(name, default_text)


def parse_config(document: Any) -> TemplateConfig:
    """Build a template configuration from a parsed YAML document.

    Args:
        document: Generic document tree (mappings, lists and scalars)

    Returns:
        Fully populated template configuration

    Raises:
        ConfigParseError: On the first schema violation found
    """
    if not isinstance(document, dict):
        raise errors.ConfigMustBeAMapping()

    config = TemplateConfig()

    output_type = _parse_output_type(document)
    config.set_output_type(output_type)
    _parse_output(config, document, output_type)
    _parse_included_files(config, document, output_type)
    _parse_variables(config, document)

    logger.debug(f"Parsed template configuration: {config!r}")
    return config


def parse_config_from_yaml_string(text: str) -> TemplateConfig:
    """Parse YAML text into a template configuration.

    Only the first document of a multi-document stream is used.
    """
    try:
        documents = list(yaml.load_all(text, Loader=CoreSchemaLoader))
    except yaml.YAMLError as exc:
        raise errors.YamlParseError(f"{errors.YamlParseError.message}: {exc}") from exc

    return parse_config(documents[0] if documents else None)


def parse_config_from_file(path: Path) -> TemplateConfig:
    """Read and parse a template configuration file.

    Raises:
        ConfigReadError: If the file cannot be read
        ConfigParseError: If the contents are not a valid configuration
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise errors.ConfigReadError(path, exc) from exc

    logger.debug(f"Loaded configuration file: {path}")
    return parse_config_from_yaml_string(text)
