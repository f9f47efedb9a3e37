"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which scans a template directory,
classifies every file once, and materialises the tree into a target
directory.  Text files are rendered with a small interpolation syntax::

    <%= product_name %>                 -- expression
    <% if preset.eslint %>...<% endif %> -- statement

JSON files are additionally re-serialised with two-space indentation, and
everything else is copied byte-for-byte.
"""

from __future__ import annotations

import asyncio
import enum
import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import (
    ChainableUndefined,
    Environment,
    StrictUndefined,
    TemplateError,
)
from rich.markup import escape

from quasar_scaffold.errors import TemplateRenderError
from quasar_scaffold.utils import console


# ---------------------------------------------------------------------------
# File classification
# ---------------------------------------------------------------------------

TEMPLATING_FILE_EXTENSIONS: frozenset[str] = frozenset(
    {"", ".json", ".js", ".cjs", ".mjs", ".ts", ".vue", ".md", ".html", ".sass", ".scss", ".css"}
)

# Names that are published as dotfiles once the escaping underscore is
# removed (``_gitignore`` -> ``.gitignore``).
DOTFILE_NAMES: frozenset[str] = frozenset(
    {
        "gitignore",
        "npmignore",
        "npmrc",
        "editorconfig",
        "eslintrc.cjs",
        "eslintignore",
        "prettierrc",
        "browserslistrc",
        "env",
    }
)


class FileKind(enum.Enum):
    """How a template file is materialised."""

    TEXT = "text"
    JSON = "json"
    BINARY = "binary"

    @classmethod
    def for_path(cls, path: str | Path) -> "FileKind":
        suffix = Path(path).suffix
        if suffix == ".json":
            return cls.JSON
        if suffix in TEMPLATING_FILE_EXTENSIONS:
            return cls.TEXT
        return cls.BINARY


@dataclass(frozen=True)
class TemplateFile:
    """A single file found while scanning a template directory."""

    source: Path
    relative_path: str
    target_relative_path: str
    kind: FileKind


def unescape_segment(name: str) -> str:
    """Remove the reserved leading underscore from a path segment.

    ``_package.json`` -> ``package.json``, ``_.gitignore`` -> ``.gitignore``
    and ``_gitignore`` -> ``.gitignore``.  Other segments are unchanged.
    """
    if not name.startswith("_"):
        return name
    name = name[1:]
    if name in DOTFILE_NAMES:
        return "." + name
    return name


def target_relative_path(relative_path: str) -> str:
    """Apply :func:`unescape_segment` to every segment of a ``/`` path."""
    return "/".join(unescape_segment(part) for part in relative_path.split("/"))


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders a template directory into a project folder.

    Undefined variables render as an empty string unless *strict* is set,
    in which case any reference outside the context raises
    :class:`TemplateRenderError`.
    """

    def __init__(self, template_dir: str | Path, *, strict: bool = False) -> None:
        self.template_dir = Path(template_dir)
        self.strict = strict
        self.env = Environment(
            block_start_string="<%",
            block_end_string="%>",
            variable_start_string="<%=",
            variable_end_string="%>",
            comment_start_string="<%#",
            comment_end_string="%>",
            undefined=StrictUndefined if strict else ChainableUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    # -- Scanning ----------------------------------------------------------

    def scan(self) -> list[TemplateFile]:
        """Return every file under the template directory, classified.

        The list is sorted by relative path.  A missing directory yields an
        empty list.
        """
        if not self.template_dir.is_dir():
            return []

        entries: list[TemplateFile] = []
        for source in sorted(self.template_dir.rglob("*")):
            if not source.is_file():
                continue
            rel = source.relative_to(self.template_dir).as_posix()
            target_rel = target_relative_path(rel)
            entries.append(
                TemplateFile(
                    source=source,
                    relative_path=rel,
                    target_relative_path=target_rel,
                    kind=FileKind.for_path(target_rel),
                )
            )
        return entries

    # -- String rendering --------------------------------------------------

    def render_string(
        self,
        template_string: str,
        context: dict[str, Any],
        *,
        name: str = "<string>",
    ) -> str:
        """Render an inline template string with the provided context."""
        try:
            template = self.env.from_string(template_string)
            return template.render(**context)
        except TemplateError as exc:
            raise TemplateRenderError(name, str(exc)) from exc

    def render_file(self, entry: TemplateFile, context: dict[str, Any]) -> str:
        """Render a text or JSON template entry and return its content."""
        try:
            raw = entry.source.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise TemplateRenderError(
                entry.relative_path, f"template is not valid UTF-8 ({exc})"
            ) from exc
        content = self.render_string(raw, context, name=entry.relative_path)
        if entry.kind is FileKind.JSON:
            try:
                data = json.loads(content)
            except json.JSONDecodeError as exc:
                raise TemplateRenderError(
                    entry.relative_path, f"rendered content is not valid JSON ({exc})"
                ) from exc
            content = json.dumps(data, indent=2, ensure_ascii=False)
        return content

    # -- Tree rendering (async) --------------------------------------------

    async def render_tree(
        self,
        output_dir: str | Path,
        context: dict[str, Any],
    ) -> list[Path]:
        """Materialise every template file under *output_dir*.

        Parent directories are created as needed and existing files are
        overwritten.

        Returns:
            List of written file paths.
        """
        out_base = Path(output_dir)
        written: list[Path] = []

        for entry in self.scan():
            target = out_base / entry.target_relative_path
            console.print(f" [green]-[/green] {escape(entry.target_relative_path)}")

            if entry.kind is FileKind.BINARY:
                await asyncio.to_thread(_copy_file, entry.source, target)
            else:
                content = self.render_file(entry, context)
                await asyncio.to_thread(_write_file, target, content)
            written.append(target)

        return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _copy_file(source: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)
