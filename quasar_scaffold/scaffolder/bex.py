"""Browser Extension (BEX) support toggle for an existing project.

BEX support is "present" when the project has a ``src-bex`` folder.
Adding it installs a small set of runtime dependencies and copies the BEX
template tree; removing it deletes the folder and uninstalls the same
dependencies.  Neither operation rolls back on a package-manager failure.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from quasar_scaffold.config import DEFAULT_TEMPLATE_DIR
from quasar_scaffold.errors import BexError, CommandError
from quasar_scaffold.utils import detect_package_manager, log, print_warning, run_command

BEX_DEPS: dict[str, str] = {
    "events": "^3.3.0",
}

BEX_DIR_NAME = "src-bex"

_PM_ENV = {"NODE_ENV": "development"}


class BexInstaller:
    """Adds or removes Browser Extension support in a Quasar project."""

    def __init__(
        self,
        app_dir: str | Path,
        package_manager: str | None = None,
        template_dir: str | Path | None = None,
    ) -> None:
        self.app_dir = Path(app_dir)
        self.package_manager = package_manager or detect_package_manager(self.app_dir)
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR / "bex"

    @property
    def bex_dir(self) -> Path:
        return self.app_dir / BEX_DIR_NAME

    def is_installed(self) -> bool:
        return self.bex_dir.exists()

    def install_args(self) -> list[str]:
        """Arguments for installing :data:`BEX_DEPS`."""
        cmd = ["install"] if self.package_manager == "npm" else ["add"]
        return cmd + [f"{name}@{version}" for name, version in BEX_DEPS.items()]

    def uninstall_args(self) -> list[str]:
        """Arguments for removing :data:`BEX_DEPS`."""
        cmd = ["uninstall", "--save"] if self.package_manager == "npm" else ["remove"]
        return cmd + list(BEX_DEPS)

    async def add(self, silent: bool = False) -> bool:
        """Install BEX support.

        Returns ``False`` (after a warning unless *silent*) when support is
        already present.

        Raises:
            BexError: If the BEX template directory is missing or the
                dependency install fails.  Nothing has been copied at that
                point.
        """
        if self.is_installed():
            if not silent:
                print_warning("Browser Extension support detected already. Aborting.")
            return False

        if not self.template_dir.is_dir():
            raise BexError(f"BEX template directory not found: {self.template_dir}")

        log("Installing BEX dependencies...")
        try:
            await run_command(
                self.package_manager, self.install_args(), cwd=self.app_dir, env=_PM_ENV
            )
        except CommandError as exc:
            raise BexError("Failed to install BEX dependencies") from exc

        log("Creating Browser Extension source folder...")
        await asyncio.to_thread(shutil.copytree, self.template_dir, self.bex_dir)
        log("Browser Extension support was added")
        return True

    async def remove(self) -> bool:
        """Remove BEX support.

        Returns ``False`` after a warning when support is absent.

        Raises:
            BexError: If the dependency uninstall fails.  The ``src-bex``
                folder has already been deleted at that point.
        """
        if not self.is_installed():
            print_warning("No Browser Extension support detected. Aborting.")
            return False

        log("Removing Browser Extension source folder")
        await asyncio.to_thread(shutil.rmtree, self.bex_dir)

        log("Uninstalling BEX dependencies...")
        try:
            await run_command(
                self.package_manager, self.uninstall_args(), cwd=self.app_dir, env=_PM_ENV
            )
        except CommandError as exc:
            raise BexError("Failed to uninstall BEX dependencies") from exc

        log("Browser Extension support was removed")
        return True
