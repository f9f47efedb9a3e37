"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and materialises a Quasar application: target
directory, rendered template layers, optional dependency install and lint
pass, and the final next-steps message.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from rich.text import Text

from quasar_scaffold.config import ProjectConfig, ScaffoldSettings
from quasar_scaffold.utils import console, install_deps, lint_folder, log

from .templates import TemplateRenderer


class ProjectGenerator:
    """Scaffolds a new application from the template layers.

    Template layers under ``<template_dir>/app`` are rendered in order:

    - ``base`` -- shared files (package.json, README, index.html, ...)
    - ``<script_type>`` -- ``js`` or ``ts`` specific sources
    - one directory per selected preset feature, when it exists

    Later layers overwrite files written by earlier ones.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: ScaffoldSettings | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or ScaffoldSettings()

    # -- Public API --------------------------------------------------------

    async def generate(self) -> Path:
        """Generate the project and optionally install and lint it.

        Dependency install and lint failures propagate as ``CommandError``;
        files already written stay on disk.

        Returns:
            Path to the generated project root.
        """
        await self.create_target_dir()
        await self.render()

        if self.config.package_manager and not self.config.skip_deps_install:
            await install_deps(self.config)
            if self.config.lint and "eslint" in self.config.preset:
                await lint_folder(self.config)

        return self.config.project_folder

    async def create_target_dir(self) -> Path:
        """Create the project folder.

        With ``overwrite`` the folder is emptied first; otherwise existing
        contents are kept.
        """
        console.print()
        log("Generating files...")
        console.print()

        folder = self.config.project_folder
        if self.config.overwrite:
            await asyncio.to_thread(_empty_dir, folder)
        else:
            await asyncio.to_thread(folder.mkdir, parents=True, exist_ok=True)
        return folder

    def template_layers(self) -> list[Path]:
        """Return the existing template layer directories, in render order."""
        root = self.settings.app_template_dir
        names = ["base", self.config.script_type, *self.config.preset]
        return [root / name for name in names if (root / name).is_dir()]

    async def render(self) -> list[Path]:
        """Render every template layer into the project folder."""
        context = self.config.template_context()
        written: list[Path] = []
        for layer in self.template_layers():
            renderer = TemplateRenderer(layer, strict=self.settings.strict_templates)
            written.extend(
                await renderer.render_tree(self.config.project_folder, context)
            )
        return written


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def build_final_message(config: ProjectConfig) -> str:
    """Return the plain-text next-steps message for *config*."""
    ver_prefix = f"{config.quasar_version}." if config.quasar_version else ""

    steps = [f"  cd {config.project_folder_name}"]
    if not config.skip_deps_install and not config.package_manager:
        steps.append("  yarn #or: npm install")
        steps.append("  yarn lint --fix # or: npm run lint -- --fix")
    if not config.skip_deps_install:
        steps.append("  quasar dev # or: yarn quasar dev # or: npx quasar dev")

    return "\n".join(
        [
            "",
            "To get started:",
            "",
            *steps,
            "",
            f"Documentation can be found at: https://{ver_prefix}quasar.dev",
            "",
            "Please give us a star on Github if you appreciate our work:",
            "  https://github.com/quasarframework/quasar",
            "",
            "Enjoy! - Quasar Team",
            "",
        ]
    )


def print_final_message(config: ProjectConfig) -> None:
    """Print the instructions of the necessary next steps."""
    message = Text(build_final_message(config))
    message.highlight_regex(r"(?m)^  (?:cd|yarn|quasar) .*$", "yellow")
    console.print(message)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _empty_dir(path: Path) -> None:
    """Create *path* if needed and delete everything inside it."""
    path.mkdir(parents=True, exist_ok=True)
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
