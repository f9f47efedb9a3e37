"""Shared pytest fixtures for the quasar-scaffold test suite.

Provides reusable fixtures for:
- Small on-disk template trees
- Ready-made ProjectConfig instances
- Mock subprocess helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from quasar_scaffold.config import ProjectConfig


# ---------------------------------------------------------------------------
# Template trees
# ---------------------------------------------------------------------------

PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c63000100000500010d0a2db4000000"
    "0049454e44ae426082"
)


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A tiny template tree exercising every file kind.

    Layout::

        _package.json          JSON template
        _gitignore             escaped dotfile
        README.md              text template
        src/_private/main.js   escaped directory segment
        public/logo.png        binary
    """
    root = tmp_path / "template"
    (root / "src" / "_private").mkdir(parents=True)
    (root / "public").mkdir()

    (root / "_package.json").write_text(
        '{"name": "<%= package_name %>", "productName": "<%= product_name %>",'
        ' "scripts": {<% if preset.eslint %>"lint": "eslint ./"<% endif %>}}',
        encoding="utf-8",
    )
    (root / "_gitignore").write_text("node_modules\n/dist\n", encoding="utf-8")
    (root / "README.md").write_text("# <%= product_name %>\n", encoding="utf-8")
    (root / "src" / "_private" / "main.js").write_text(
        "console.log('<%= package_name %>')\n", encoding="utf-8"
    )
    (root / "public" / "logo.png").write_bytes(PNG_BYTES)
    return root


@pytest.fixture
def app_template_root(tmp_path: Path) -> Path:
    """A template root with ``app/{base,js,ts,eslint}`` layers and ``bex``."""
    root = tmp_path / "templates"
    base = root / "app" / "base"
    base.mkdir(parents=True)
    (base / "_package.json").write_text(
        '{"name": "<%= package_name %>", "description": "<%= description %>"}',
        encoding="utf-8",
    )
    (base / "README.md").write_text("# <%= product_name %>\n", encoding="utf-8")

    js = root / "app" / "js"
    js.mkdir(parents=True)
    (js / "quasar.config.js").write_text("// js <%= script_type %>\n", encoding="utf-8")

    ts = root / "app" / "ts"
    ts.mkdir(parents=True)
    (ts / "quasar.config.ts").write_text("// ts <%= script_type %>\n", encoding="utf-8")

    eslint = root / "app" / "eslint"
    eslint.mkdir(parents=True)
    (eslint / "_eslintrc.cjs").write_text("module.exports = {}\n", encoding="utf-8")

    bex = root / "bex"
    bex.mkdir(parents=True)
    (bex / "manifest.json").write_text(json.dumps({"manifest_version": 3}), encoding="utf-8")
    (bex / "background.js").write_text("// background\n", encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory building a ProjectConfig rooted in ``tmp_path``."""

    def factory(**overrides: Any) -> ProjectConfig:
        answers: dict[str, Any] = {
            "project_folder": "my-app",
            "product_name": "My App",
            "description": "A test project",
            "author": "Jane Doe <jane@example.com>",
        }
        answers.update(overrides)
        return ProjectConfig.from_answers(answers, cwd=tmp_path)

    return factory


# ---------------------------------------------------------------------------
# Subprocess mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """

    def factory(returncode: int = 0) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
