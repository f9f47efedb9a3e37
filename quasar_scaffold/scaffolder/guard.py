"""Pre-flight check that refuses to scaffold inside an existing project."""

from __future__ import annotations

from pathlib import Path

from quasar_scaffold.errors import ScaffoldError

QUASAR_CONFIG_FILENAMES: tuple[str, ...] = (
    "quasar.config.js",
    "quasar.config.mjs",
    "quasar.config.ts",
    "quasar.config.cjs",
    "quasar.conf.js",  # legacy
)


def find_project_root(start: str | Path | None = None) -> Path | None:
    """Return the nearest directory at or above *start* holding a Quasar config."""
    directory = Path(start if start is not None else Path.cwd()).resolve()
    for candidate in (directory, *directory.parents):
        if any((candidate / name).exists() for name in QUASAR_CONFIG_FILENAMES):
            return candidate
    return None


def ensure_outside_project(cwd: str | Path | None = None) -> None:
    """Raise if *cwd* (default: the current directory) is inside a Quasar project.

    Raises:
        ScaffoldError: When any directory from *cwd* up to the filesystem
            root contains a Quasar config file.
    """
    if find_project_root(cwd) is not None:
        raise ScaffoldError(
            "Error. This command must NOT be executed inside of a Quasar project folder."
        )
