"""Tests for the template renderer.

Covers:
- Reserved-name escaping of path segments
- File classification during the scan
- Text, JSON and binary materialisation
- Undefined variables (lenient and strict)
- Malformed JSON output
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from quasar_scaffold.errors import TemplateRenderError
from quasar_scaffold.scaffolder.templates import (
    FileKind,
    TemplateRenderer,
    target_relative_path,
    unescape_segment,
)
from quasar_scaffold.utils import escape_string

pytestmark = pytest.mark.unit


def _context(**overrides):
    context = {
        "package_name": "my-app",
        "product_name": "My App",
        "preset": {"eslint": False},
    }
    context.update(overrides)
    return context


# ---------------------------------------------------------------------------
# Path escaping
# ---------------------------------------------------------------------------


class TestUnescape:
    @pytest.mark.parametrize(
        "segment, expected",
        [
            ("_package.json", "package.json"),
            ("_gitignore", ".gitignore"),
            ("_.gitignore", ".gitignore"),
            ("_eslintrc.cjs", ".eslintrc.cjs"),
            ("_npmrc", ".npmrc"),
            ("_private", "private"),
            ("README.md", "README.md"),
            ("src", "src"),
        ],
    )
    def test_segment(self, segment, expected):
        assert unescape_segment(segment) == expected

    def test_every_segment_is_unescaped(self):
        assert target_relative_path("_src/_nested/_gitignore") == "src/nested/.gitignore"

    def test_underscore_inside_name_kept(self):
        assert target_relative_path("src/my_file.js") == "src/my_file.js"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestFileKind:
    @pytest.mark.parametrize(
        "path, kind",
        [
            ("package.json", FileKind.JSON),
            ("src/App.vue", FileKind.TEXT),
            ("quasar.config.js", FileKind.TEXT),
            ("quasar.config.ts", FileKind.TEXT),
            (".eslintrc.cjs", FileKind.TEXT),
            ("README.md", FileKind.TEXT),
            ("index.html", FileKind.TEXT),
            ("src/css/app.sass", FileKind.TEXT),
            (".gitignore", FileKind.TEXT),
            ("LICENSE", FileKind.TEXT),
            ("public/logo.png", FileKind.BINARY),
            ("public/favicon.ico", FileKind.BINARY),
            ("fonts/font.woff2", FileKind.BINARY),
        ],
    )
    def test_for_path(self, path, kind):
        assert FileKind.for_path(path) is kind


class TestScan:
    def test_scan_classifies_once(self, template_dir: Path):
        entries = {e.relative_path: e for e in TemplateRenderer(template_dir).scan()}

        assert set(entries) == {
            "_gitignore",
            "_package.json",
            "README.md",
            "public/logo.png",
            "src/_private/main.js",
        }
        assert entries["_package.json"].kind is FileKind.JSON
        assert entries["_package.json"].target_relative_path == "package.json"
        assert entries["_gitignore"].target_relative_path == ".gitignore"
        assert entries["src/_private/main.js"].target_relative_path == "src/private/main.js"
        assert entries["public/logo.png"].kind is FileKind.BINARY

    def test_scan_is_sorted(self, template_dir: Path):
        paths = [e.relative_path for e in TemplateRenderer(template_dir).scan()]
        assert paths == sorted(paths)

    def test_missing_dir_is_empty(self, tmp_path: Path):
        assert TemplateRenderer(tmp_path / "missing").scan() == []


# ---------------------------------------------------------------------------
# String rendering
# ---------------------------------------------------------------------------


class TestRenderString:
    def test_interpolation(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render_string("Hi <%= product_name %>!", _context()) == "Hi My App!"

    def test_statements(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        template = "a\n<% if preset.eslint %>\nlint\n<% endif %>\nb\n"
        assert renderer.render_string(template, _context()) == "a\nb\n"
        assert (
            renderer.render_string(template, _context(preset={"eslint": True}))
            == "a\nlint\nb\n"
        )

    def test_vue_mustache_untouched(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        template = "<p>{{ title }}</p> {% raw %} <%= product_name %>"
        assert renderer.render_string(template, _context()) == "<p>{{ title }}</p> {% raw %} My App"

    def test_undefined_renders_empty(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render_string("[<%= missing %>]", _context()) == "[]"
        assert renderer.render_string("[<%= missing.deeper %>]", _context()) == "[]"

    def test_undefined_in_strict_mode_raises(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path, strict=True)
        with pytest.raises(TemplateRenderError, match="missing"):
            renderer.render_string("<%= missing %>", _context(), name="README.md")

    def test_syntax_error_raises(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        with pytest.raises(TemplateRenderError) as exc_info:
            renderer.render_string("<% if %>", _context(), name="broken.js")
        assert exc_info.value.path == Path("broken.js")

    def test_no_html_escaping(self, tmp_path: Path):
        renderer = TemplateRenderer(tmp_path)
        assert renderer.render_string("<%= author %>", {"author": "A <a@b.c>"}) == "A <a@b.c>"


# ---------------------------------------------------------------------------
# Tree rendering
# ---------------------------------------------------------------------------


class TestRenderTree:
    @pytest.mark.asyncio
    async def test_writes_every_file(self, template_dir: Path, tmp_path: Path):
        out = tmp_path / "out"
        written = await TemplateRenderer(template_dir).render_tree(out, _context())

        assert sorted(p.relative_to(out).as_posix() for p in written) == [
            ".gitignore",
            "README.md",
            "package.json",
            "public/logo.png",
            "src/private/main.js",
        ]

    @pytest.mark.asyncio
    async def test_gitignore_renamed(self, template_dir: Path, tmp_path: Path):
        out = tmp_path / "out"
        await TemplateRenderer(template_dir).render_tree(out, _context())

        assert (out / ".gitignore").read_text(encoding="utf-8") == "node_modules\n/dist\n"
        assert not (out / "_gitignore").exists()

    @pytest.mark.asyncio
    async def test_text_substitution(self, template_dir: Path, tmp_path: Path):
        out = tmp_path / "out"
        await TemplateRenderer(template_dir).render_tree(out, _context())

        assert (out / "README.md").read_text(encoding="utf-8") == "# My App\n"
        assert (out / "src" / "private" / "main.js").read_text(encoding="utf-8") == (
            "console.log('my-app')\n"
        )

    @pytest.mark.asyncio
    async def test_json_normalised(self, template_dir: Path, tmp_path: Path):
        out = tmp_path / "out"
        await TemplateRenderer(template_dir).render_tree(
            out, _context(preset={"eslint": True})
        )

        raw = (out / "package.json").read_text(encoding="utf-8")
        expected = {
            "name": "my-app",
            "productName": "My App",
            "scripts": {"lint": "eslint ./"},
        }
        assert json.loads(raw) == expected
        assert raw == json.dumps(expected, indent=2)
        assert '\n  "name": "my-app",' in raw

    @pytest.mark.asyncio
    async def test_binary_copied_verbatim(self, template_dir: Path, tmp_path: Path):
        out = tmp_path / "out"
        await TemplateRenderer(template_dir).render_tree(out, _context())

        assert (out / "public" / "logo.png").read_bytes() == (
            template_dir / "public" / "logo.png"
        ).read_bytes()

    @pytest.mark.asyncio
    async def test_binary_with_template_markers_not_rendered(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "data.bin").write_bytes(b"<%= product_name %>\xff\x00")
        out = tmp_path / "out"

        await TemplateRenderer(src).render_tree(out, _context())
        assert (out / "data.bin").read_bytes() == b"<%= product_name %>\xff\x00"

    @pytest.mark.asyncio
    async def test_existing_files_preserved(self, template_dir: Path, tmp_path: Path):
        out = tmp_path / "out"
        out.mkdir()
        (out / "keep.txt").write_text("mine", encoding="utf-8")

        await TemplateRenderer(template_dir).render_tree(out, _context())
        assert (out / "keep.txt").read_text(encoding="utf-8") == "mine"

    @pytest.mark.asyncio
    async def test_malformed_json_names_file(self, tmp_path: Path):
        src = tmp_path / "src"
        (src / "config").mkdir(parents=True)
        (src / "config" / "_settings.json").write_text(
            '{"name": <%= package_name %>}', encoding="utf-8"
        )

        with pytest.raises(TemplateRenderError) as exc_info:
            await TemplateRenderer(src).render_tree(tmp_path / "out", _context())

        assert exc_info.value.path == Path("config/_settings.json")
        assert "not valid JSON" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_strict_mode_fails_on_unknown_reference(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "README.md").write_text("<%= nope %>", encoding="utf-8")

        with pytest.raises(TemplateRenderError):
            await TemplateRenderer(src, strict=True).render_tree(tmp_path / "out", _context())

    @pytest.mark.asyncio
    async def test_json_keeps_quotes_and_markup_characters(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "_package.json").write_text(
            '{"description": "<%= description %>", "author": "<%= author %>"}',
            encoding="utf-8",
        )
        description = 'Tom & "Jerry" <b>'
        context = _context(
            description=escape_string(description), author="Jane <jane@example.com>"
        )

        await TemplateRenderer(src).render_tree(tmp_path / "out", context)

        data = json.loads((tmp_path / "out" / "package.json").read_text(encoding="utf-8"))
        assert data == {"description": description, "author": "Jane <jane@example.com>"}

    @pytest.mark.asyncio
    async def test_non_utf8_text_template_names_file(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        (src / "README.md").write_bytes(b"caf\xe9 <%= product_name %>\n")

        with pytest.raises(TemplateRenderError) as exc_info:
            await TemplateRenderer(src).render_tree(tmp_path / "out", _context())

        assert exc_info.value.path == Path("README.md")
        assert "not valid UTF-8" in str(exc_info.value)
