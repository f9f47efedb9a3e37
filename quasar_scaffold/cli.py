"""quasar-scaffold command line interface.

Usage::

    quasar-scaffold create my-app
    quasar-scaffold create my-app --overwrite --package-manager npm
    quasar-scaffold bex add
    quasar-scaffold bex remove
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from quasar_scaffold import __version__
from quasar_scaffold.config import ProjectConfig, ScaffoldSettings
from quasar_scaffold.errors import ScaffoldError
from quasar_scaffold.scaffolder.bex import BexInstaller
from quasar_scaffold.scaffolder.generator import ProjectGenerator, print_final_message
from quasar_scaffold.scaffolder.guard import ensure_outside_project, find_project_root
from quasar_scaffold.scaffolder.prompts import PromptOrchestrator, build_app_questions
from quasar_scaffold.utils import console, print_error, print_success


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def create_app(args: argparse.Namespace, settings: ScaffoldSettings) -> ProjectConfig:
    """Run the questionnaire and scaffold a new application."""
    ensure_outside_project()

    preset_answers: dict[str, Any] = {}
    if args.folder:
        preset_answers["project_folder"] = args.folder
    if args.overwrite:
        preset_answers["overwrite"] = True
    if args.package_manager or settings.package_manager:
        preset_answers["package_manager"] = args.package_manager or settings.package_manager

    answers = PromptOrchestrator().ask(build_app_questions(), preset_answers)
    answers["skip_deps_install"] = args.skip_install
    answers["lint"] = not args.no_lint

    try:
        config = ProjectConfig.from_answers(answers)
    except ValidationError as exc:
        raise ScaffoldError(f"Invalid answers:\n{exc}") from exc

    await ProjectGenerator(config, settings).generate()
    print_final_message(config)
    return config


async def toggle_bex(args: argparse.Namespace, settings: ScaffoldSettings) -> bool:
    """Add or remove Browser Extension support in an existing project."""
    app_dir = Path(args.app_dir) if args.app_dir else find_project_root()
    if app_dir is None:
        raise ScaffoldError("Error. This command must be executed inside a Quasar project folder.")

    installer = BexInstaller(
        app_dir,
        package_manager=settings.package_manager,
        template_dir=settings.bex_template_dir,
    )
    if args.action == "add":
        return await installer.add(silent=args.silent)
    return await installer.remove()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quasar-scaffold",
        description="Scaffold Quasar apps and manage Browser Extension support",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  quasar-scaffold create my-app\n"
            "  quasar-scaffold create my-app --package-manager npm --no-lint\n"
            "  quasar-scaffold bex add\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--template-dir",
        default=None,
        help="Use templates from this directory instead of the bundled ones",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a template references an unknown variable",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Scaffold a new Quasar app")
    create.add_argument("folder", nargs="?", default=None, help="Project folder")
    create.add_argument(
        "--overwrite",
        action="store_true",
        help="Empty the project folder if it already has files",
    )
    create.add_argument(
        "--package-manager", "-p",
        choices=["yarn", "npm", "pnpm"],
        default=None,
        help="Install dependencies with this package manager",
    )
    create.add_argument(
        "--skip-install",
        action="store_true",
        help="Do not install dependencies",
    )
    create.add_argument(
        "--no-lint",
        action="store_true",
        help="Do not run the lint --fix pass after installing",
    )

    bex = subparsers.add_parser("bex", help="Add or remove Browser Extension support")
    bex.add_argument("action", choices=["add", "remove"])
    bex.add_argument(
        "--app-dir",
        default=None,
        help="Project root (default: nearest folder with a quasar config)",
    )
    bex.add_argument(
        "--silent",
        action="store_true",
        help="Do not warn when support is already present",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``quasar-scaffold``."""
    args = build_parser().parse_args(argv)

    try:
        settings = ScaffoldSettings.from_env()
        if args.template_dir:
            settings = settings.model_copy(update={"template_dir": Path(args.template_dir)})
        if args.strict:
            settings = settings.model_copy(update={"strict_templates": True})
    except ValidationError as exc:
        print_error(f"Invalid settings:\n{exc}")
        sys.exit(1)

    try:
        if args.command == "create":
            asyncio.run(create_app(args, settings))
        else:
            changed = asyncio.run(toggle_bex(args, settings))
            if changed:
                print_success("Done.")
    except ScaffoldError as exc:
        console.print()
        print_error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        console.print()
        print_error("Interrupted")
        sys.exit(1)


if __name__ == "__main__":
    main()
