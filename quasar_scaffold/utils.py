"""Shared utility functions for quasar-scaffold.

Provides async command execution, package-manager helpers, package-name
validation and inference, and Rich-based console reporting.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from rich.console import Console
from rich.markup import escape

from quasar_scaffold.errors import CommandError

if TYPE_CHECKING:
    from quasar_scaffold.config import ProjectConfig

console = Console()

# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def log(message: str = "") -> None:
    """Print a progress line."""
    console.print(f" [bold cyan]•[/bold cyan] {message}" if message else "")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str,
    args: list[str],
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> None:
    """Run an external command with the terminal attached.

    stdin/stdout/stderr are inherited from the parent process so package
    managers can draw their own progress output.

    Args:
        cmd: Executable name (looked up on ``PATH``).
        args: Arguments passed to the executable.
        cwd: Working directory for the child process (defaults to the
            current directory).
        env: Optional extra environment variables merged on top of
            ``os.environ``.

    Raises:
        CommandError: If the executable cannot be found or exits with a
            non-zero status, or if the wait is interrupted.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    console.print()
    try:
        process = await asyncio.create_subprocess_exec(
            cmd,
            *args,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except FileNotFoundError as exc:
        console.print(f" {cmd} FAILED...")
        console.print()
        raise CommandError(cmd, 127, f"Command not found: {cmd}") from exc

    try:
        returncode = await process.wait()
    except asyncio.CancelledError as exc:
        console.print()
        console.print(f" {cmd} FAILED...")
        console.print()
        raise CommandError(cmd, 130, f"{cmd} was interrupted") from exc
    console.print()

    if returncode:
        console.print(f" {cmd} FAILED...")
        console.print()
        raise CommandError(cmd, returncode)


async def install_deps(config: ProjectConfig) -> None:
    """Install the generated project's dependencies."""
    if not config.package_manager:
        return
    await run_command(config.package_manager, ["install"], cwd=config.project_folder)


async def lint_folder(config: ProjectConfig) -> None:
    """Run the generated project's lint script with ``--fix``."""
    if not config.package_manager:
        return
    args = (
        ["run", "lint", "--", "--fix"]
        if config.package_manager == "npm"
        else ["run", "lint", "--fix"]
    )
    await run_command(config.package_manager, args, cwd=config.project_folder)


# ---------------------------------------------------------------------------
# Package managers
# ---------------------------------------------------------------------------

PACKAGE_MANAGERS: tuple[str, ...] = ("yarn", "npm", "pnpm")

# Lockfile -> package manager, checked in order.
LOCKFILES: dict[str, str] = {
    "yarn.lock": "yarn",
    "pnpm-lock.yaml": "pnpm",
    "package-lock.json": "npm",
}


def running_package_manager() -> str | None:
    """Return the package manager that launched this process, if any.

    Package managers export ``npm_config_user_agent`` (e.g.
    ``"yarn/1.22.19 npm/? node/v18.12.0 linux x64"``) to the scripts they
    run.
    """
    user_agent = os.environ.get("npm_config_user_agent")
    if not user_agent:
        return None
    return user_agent.split(" ")[0].split("/")[0] or None


def detect_package_manager(app_dir: str | Path) -> str:
    """Pick the package manager for an existing project.

    Lockfiles win, then the launching package manager, then ``npm``.
    """
    root = Path(app_dir)
    for lockfile, manager in LOCKFILES.items():
        if (root / lockfile).exists():
            return manager
    return running_package_manager() or "npm"


# ---------------------------------------------------------------------------
# Name helpers
# ---------------------------------------------------------------------------

_PACKAGE_NAME_RE = re.compile(
    r"^(?:@[a-z0-9\-*~][a-z0-9\-*._~]*/)?[a-z0-9\-~][a-z0-9\-._~]*$"
)


def is_valid_package_name(name: str) -> bool:
    """Return ``True`` if *name* is a valid npm package name.

    Examples::

        is_valid_package_name("my-app")      -> True
        is_valid_package_name("@scope/pkg")  -> True
        is_valid_package_name("My App")      -> False
        is_valid_package_name("_leading")    -> False
    """
    return bool(_PACKAGE_NAME_RE.match(name))


def infer_package_name(project_folder: str) -> str:
    """Derive a valid package name from a folder name.

    * Trims and lowercases the input.
    * Collapses whitespace runs into a single hyphen.
    * Strips one leading ``.`` or ``_``.
    * Replaces any remaining invalid character runs with a hyphen.

    Examples::

        infer_package_name("My Quasar  App") -> "my-quasar-app"
        infer_package_name("_Private")       -> "private"
    """
    name = project_folder.strip().lower()
    name = re.sub(r"\s+", "-", name)
    name = re.sub(r"^[._]", "", name)
    return re.sub(r"[^a-z0-9\-~]+", "-", name)


def escape_string(value: str) -> str:
    """Escape *value* for embedding inside a JSON string literal."""
    return json.dumps(value, ensure_ascii=False)[1:-1]


def get_git_user() -> str:
    """Return ``"Name <email>"`` from the local git config, or ``""``."""
    values: list[str] = []
    for key in ("user.name", "user.email"):
        try:
            result = subprocess.run(
                ["git", "config", "--get", key],
                capture_output=True,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError):
            return ""
        values.append(result.stdout.strip())

    name, email = values
    name = escape_string(name) if name else ""
    email = f" <{email}>" if email else ""
    return name + email


def to_flag_map(keys: Iterable[str]) -> dict[str, bool]:
    """Turn ``["eslint", "pinia"]`` into ``{"eslint": True, "pinia": True}``."""
    return {key: True for key in keys}
