from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest


def write_tree(root: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def make_template(tmp_path: Path) -> Callable[..., Path]:
    """Create ``templates/<name>/config.yml`` plus ``files/`` and return the templates dir."""

    def _make(name: str, config: str, files: dict[str, str]) -> Path:
        templates_dir = tmp_path / "templates"
        template_dir = templates_dir / name
        (template_dir / "files").mkdir(parents=True, exist_ok=True)
        (template_dir / "config.yml").write_text(config, encoding="utf-8")
        write_tree(template_dir / "files", files)
        return templates_dir

    return _make
