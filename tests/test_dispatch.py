"""Tests for render dispatch (utsusu.rendering.dispatch).

Covers file mode, directory mode, selection failures and fail-fast behaviour, using both
the Jinja2 engine and an in-memory fake engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence

import pytest

from conftest import write_tree
from utsusu.config.parser import parse_config_from_yaml_string
from utsusu.core.errors import (
    NoMatchingFilesError,
    OutputDirectoryError,
    OutputWriteError,
    TemplateLoadError,
    TemplateRenderError,
    TooManyMatchingFilesError,
)
from utsusu.core.models import TemplateOutputType
from utsusu.rendering.context import resolve_bindings
from utsusu.rendering.discovery import list_template_files
from utsusu.rendering.dispatch import render_template
from utsusu.rendering.engine import template_name


class FakeTemplates:
    def __init__(self, sources: dict[str, str], fail_on: set[str]) -> None:
        self.sources = sources
        self.fail_on = fail_on
        self.rendered: list[str] = []

    @property
    def names(self) -> list[str]:
        return sorted(self.sources)

    def render(self, name: str, bindings: Mapping[str, str]) -> str:
        if name in self.fail_on:
            raise TemplateRenderError(Path(name), self.names, RuntimeError("boom"))
        self.rendered.append(name)
        text = self.sources[name]
        for key, value in bindings.items():
            text = text.replace("{{" + key + "}}", value)
        return text


class FakeEngine:
    """In-memory engine: renders by plain ``{{name}}`` substitution."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.loaded: list[Path] = []
        self.templates: FakeTemplates | None = None

    def load(self, paths: Sequence[Path], root: Path) -> FakeTemplates:
        self.loaded = list(paths)
        sources = {template_name(p, root): p.read_text(encoding="utf-8") for p in paths}
        self.templates = FakeTemplates(sources, self.fail_on)
        return self.templates


DIRECTORY_CONFIG = """
type: directory
output:
  directory: out
include: ["*.txt", "sub/*.txt"]
variables:
  name: World
"""


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    root = tmp_path / "files"
    root.mkdir()
    return root


# ---------------------------------------------------------------------------
# File mode
# ---------------------------------------------------------------------------


class TestFileMode:
    CONFIG = "type: file\noutput:\n  filename: {out}\ninclude: template.txt\nvariables:\n  name: World\n"

    def test_renders_hello_world(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"template.txt": "Hello {{name}}"})
        out = tmp_path / "hello.txt"
        config = parse_config_from_yaml_string(self.CONFIG.format(out=out))

        result = render_template(
            config, list_template_files(files_root), files_root, resolve_bindings(config)
        )

        assert out.read_text(encoding="utf-8") == "Hello World"
        assert result.output_type == TemplateOutputType.FILE
        assert result.destination == out
        assert (result.files_written, result.files_total) == (1, 1)

    def test_override_replaces_default(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"template.txt": "Hello {{name}}"})
        out = tmp_path / "hello.txt"
        config = parse_config_from_yaml_string(self.CONFIG.format(out=out))

        render_template(
            config,
            list_template_files(files_root),
            files_root,
            resolve_bindings(config, {"name": "Utsusu"}),
        )

        assert out.read_text(encoding="utf-8") == "Hello Utsusu"

    def test_explicit_output_overrides_configured_name(
        self, tmp_path: Path, files_root: Path
    ) -> None:
        write_tree(files_root, {"template.txt": "Hello {{name}}"})
        configured = tmp_path / "configured.txt"
        explicit = tmp_path / "nested" / "explicit.txt"
        config = parse_config_from_yaml_string(self.CONFIG.format(out=configured))

        result = render_template(
            config,
            list_template_files(files_root),
            files_root,
            resolve_bindings(config),
            output=explicit,
        )

        assert result.destination == explicit
        assert explicit.read_text(encoding="utf-8") == "Hello World"
        assert not configured.exists()

    def test_wildcard_matching_two_files_is_rejected(
        self, tmp_path: Path, files_root: Path
    ) -> None:
        write_tree(files_root, {"a.txt": "a", "b.txt": "b"})
        out = tmp_path / "out.txt"
        config = parse_config_from_yaml_string(
            f"type: file\noutput:\n  filename: {out}\ninclude: ['*.txt']\n"
        )
        engine = FakeEngine()

        with pytest.raises(TooManyMatchingFilesError) as excinfo:
            render_template(
                config, list_template_files(files_root), files_root, {}, engine=engine
            )

        assert len(excinfo.value.paths) == 2
        assert engine.loaded == []
        assert not out.exists()

    def test_no_matching_files(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"other.md": ""})
        config = parse_config_from_yaml_string(self.CONFIG.format(out=tmp_path / "x"))

        with pytest.raises(NoMatchingFilesError):
            render_template(config, list_template_files(files_root), files_root, {})

    def test_render_failure_writes_nothing(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"template.txt": "Hello {{name}}"})
        out = tmp_path / "hello.txt"
        config = parse_config_from_yaml_string(self.CONFIG.format(out=out))

        with pytest.raises(TemplateRenderError):
            render_template(
                config,
                list_template_files(files_root),
                files_root,
                {},
                engine=FakeEngine(fail_on={"template.txt"}),
            )

        assert not out.exists()

    def test_load_failure_aborts(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"template.txt": "{% for %}"})
        out = tmp_path / "hello.txt"
        config = parse_config_from_yaml_string(self.CONFIG.format(out=out))

        with pytest.raises(TemplateLoadError):
            render_template(config, list_template_files(files_root), files_root, {})

        assert not out.exists()

    def test_write_failure(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"template.txt": "Hello"})
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        out = blocker / "hello.txt"
        config = parse_config_from_yaml_string(self.CONFIG.format(out=out))

        with pytest.raises(OutputWriteError) as excinfo:
            render_template(config, list_template_files(files_root), files_root, {})

        assert excinfo.value.path == out
        assert excinfo.value.exit_code == 10


# ---------------------------------------------------------------------------
# Directory mode
# ---------------------------------------------------------------------------


class TestDirectoryMode:
    def test_renders_tree(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(
            files_root,
            {"a.txt": "A {{name}}", "b.txt": "B", "sub/c.txt": "C {{name}}", "skip.md": "no"},
        )
        config = parse_config_from_yaml_string(DIRECTORY_CONFIG)
        out = tmp_path / "out"

        result = render_template(
            config,
            list_template_files(files_root),
            files_root,
            resolve_bindings(config),
            output=out,
        )

        assert (out / "a.txt").read_text(encoding="utf-8") == "A World"
        assert (out / "b.txt").read_text(encoding="utf-8") == "B"
        assert (out / "sub" / "c.txt").read_text(encoding="utf-8") == "C World"
        assert not (out / "skip.md").exists()
        assert result.output_type == TemplateOutputType.DIRECTORY
        assert result.destination == out
        assert (result.files_written, result.files_total) == (3, 3)

    def test_uses_configured_directory(
        self, tmp_path: Path, files_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        write_tree(files_root, {"a.txt": "A"})
        config = parse_config_from_yaml_string(DIRECTORY_CONFIG)

        result = render_template(config, list_template_files(files_root), files_root, {})

        assert result.destination == Path("out")
        assert (tmp_path / "out" / "a.txt").read_text(encoding="utf-8") == "A"

    def test_existing_output_directory_is_fatal(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"a.txt": "A"})
        out = tmp_path / "out"
        out.mkdir()
        config = parse_config_from_yaml_string(DIRECTORY_CONFIG)

        with pytest.raises(OutputDirectoryError) as excinfo:
            render_template(
                config, list_template_files(files_root), files_root, {}, output=out
            )

        assert excinfo.value.path == out
        assert excinfo.value.files_written == 0
        assert excinfo.value.files_total == 1

    def test_no_matching_files(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"a.md": ""})
        config = parse_config_from_yaml_string(DIRECTORY_CONFIG)
        out = tmp_path / "out"

        with pytest.raises(NoMatchingFilesError):
            render_template(
                config, list_template_files(files_root), files_root, {}, output=out
            )

        assert not out.exists()

    def test_first_failure_aborts_and_counts_progress(
        self, tmp_path: Path, files_root: Path
    ) -> None:
        write_tree(files_root, {"a.txt": "A", "b.txt": "B", "sub/c.txt": "C"})
        config = parse_config_from_yaml_string(DIRECTORY_CONFIG)
        out = tmp_path / "out"
        engine = FakeEngine(fail_on={"b.txt"})

        with pytest.raises(TemplateRenderError) as excinfo:
            render_template(
                config,
                list_template_files(files_root),
                files_root,
                {},
                engine=engine,
                output=out,
            )

        # Selection is sorted: a.txt, b.txt, sub/c.txt
        assert excinfo.value.files_written == 1
        assert excinfo.value.files_total == 3
        assert (out / "a.txt").exists()
        assert not (out / "sub" / "c.txt").exists()
        assert engine.templates is not None
        assert engine.templates.rendered == ["a.txt"]

    def test_expression_error_counts_progress(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"a.txt": "A", "b.txt": "{{ 1 / 0 }}", "sub/c.txt": "C"})
        config = parse_config_from_yaml_string(DIRECTORY_CONFIG)
        out = tmp_path / "out"

        with pytest.raises(TemplateRenderError) as excinfo:
            render_template(
                config, list_template_files(files_root), files_root, {}, output=out
            )

        assert isinstance(excinfo.value.cause, ZeroDivisionError)
        assert (excinfo.value.files_written, excinfo.value.files_total) == (1, 3)
        assert (out / "a.txt").exists()
        assert not (out / "b.txt").exists()

    def test_single_glob_may_match_many(self, tmp_path: Path, files_root: Path) -> None:
        write_tree(files_root, {"a.txt": "A", "b.txt": "B"})
        config = parse_config_from_yaml_string(
            "type: directory\noutput: {directory: out}\ninclude: '*.txt'\n"
        )

        result = render_template(
            config,
            list_template_files(files_root),
            files_root,
            {},
            engine=FakeEngine(),
            output=tmp_path / "out",
        )

        assert result.files_written == 2
