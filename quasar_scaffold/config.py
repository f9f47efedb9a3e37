"""quasar-scaffold configuration.

Typed configuration for a scaffolding run. ``ProjectConfig`` is the single
record built from the questionnaire answers and threaded through every
stage; ``ScaffoldSettings`` holds process-level knobs that can come from
environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quasar_scaffold.utils import (
    PACKAGE_MANAGERS,
    infer_package_name,
    is_valid_package_name,
    to_flag_map,
)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Optional features offered by the questionnaire; each may have an overlay
# directory under ``templates/app/<feature>``.
PRESET_FEATURES: tuple[str, ...] = ("eslint", "pinia", "axios", "i18n")


class ScaffoldSettings(BaseModel):
    """Process-level settings, independent of the questionnaire."""

    template_dir: Path = Field(default=DEFAULT_TEMPLATE_DIR)
    strict_templates: bool = Field(
        default=False,
        description="Fail on template references to unknown variables",
    )
    package_manager: str | None = Field(
        default=None,
        description="Skip the package manager question and use this one",
    )

    @property
    def app_template_dir(self) -> Path:
        """Root of the application templates."""
        return self.template_dir / "app"

    @property
    def bex_template_dir(self) -> Path:
        """Template tree copied into ``src-bex`` by ``bex add``."""
        return self.template_dir / "bex"

    @field_validator("package_manager")
    @classmethod
    def _known_package_manager(cls, value: str | None) -> str | None:
        if value is not None and value not in PACKAGE_MANAGERS:
            raise ValueError(
                f"Unknown package manager {value!r} (expected one of {', '.join(PACKAGE_MANAGERS)})"
            )
        return value

    @classmethod
    def from_env(cls) -> "ScaffoldSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            QUASAR_SCAFFOLD_TEMPLATE_DIR, QUASAR_SCAFFOLD_STRICT,
            QUASAR_SCAFFOLD_PACKAGE_MANAGER.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("QUASAR_SCAFFOLD_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["QUASAR_SCAFFOLD_TEMPLATE_DIR"])
        if os.environ.get("QUASAR_SCAFFOLD_STRICT"):
            kwargs["strict_templates"] = os.environ["QUASAR_SCAFFOLD_STRICT"].lower() in (
                "1",
                "true",
                "yes",
            )
        if os.environ.get("QUASAR_SCAFFOLD_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["QUASAR_SCAFFOLD_PACKAGE_MANAGER"]
        return cls(**kwargs)


class ProjectConfig(BaseModel):
    """Everything a scaffolding run needs to know about the new project.

    Instances are frozen: build one from the questionnaire answers with
    :meth:`from_answers` and pass it to every stage.
    """

    model_config = ConfigDict(frozen=True)

    project_folder: Path
    project_folder_name: str
    overwrite: bool = False
    package_name: str
    product_name: str = "Quasar App"
    description: str = "A Quasar Project"
    author: str = ""
    license: str = "MIT"
    repository_type: str = "git"
    repository_url: str = ""
    homepage: str = ""
    bugs: str = ""
    quasar_version: Literal["v1", "v2"] = "v2"
    script_type: Literal["js", "ts"] = "js"
    preset: list[str] = Field(default_factory=list)
    package_manager: str | None = None
    skip_deps_install: bool = False
    lint: bool = True

    @field_validator("package_name")
    @classmethod
    def _valid_package_name(cls, value: str) -> str:
        if not is_valid_package_name(value):
            raise ValueError(f"Invalid package.json name: {value!r}")
        return value

    @field_validator("product_name")
    @classmethod
    def _non_empty_product_name(cls, value: str) -> str:
        if not value:
            raise ValueError("Invalid product name")
        return value

    @field_validator("preset")
    @classmethod
    def _known_preset(cls, value: list[str]) -> list[str]:
        unknown = [item for item in value if item not in PRESET_FEATURES]
        if unknown:
            raise ValueError(f"Unknown preset feature(s): {', '.join(unknown)}")
        return value

    @field_validator("package_manager")
    @classmethod
    def _known_package_manager(cls, value: str | None) -> str | None:
        if value is not None and value not in PACKAGE_MANAGERS:
            raise ValueError(f"Unknown package manager {value!r}")
        return value

    @classmethod
    def from_answers(
        cls, answers: dict[str, Any], cwd: str | Path | None = None
    ) -> "ProjectConfig":
        """Build a config from questionnaire answers.

        ``project_folder`` is resolved against *cwd*.  When no explicit
        ``package_name`` was answered the folder name is used if it is a
        valid package name, otherwise one is inferred from it.
        """
        base = Path(cwd) if cwd is not None else Path.cwd()
        folder = (base / str(answers["project_folder"]).strip()).resolve()
        folder_name = folder.name

        package_name = answers.get("package_name") or (
            folder_name
            if is_valid_package_name(folder_name)
            else infer_package_name(folder_name)
        )

        fields = {
            key: value
            for key, value in answers.items()
            if key in cls.model_fields and value is not None
        }
        fields.update(
            project_folder=folder,
            project_folder_name=folder_name,
            package_name=package_name,
        )
        if fields.get("package_manager") is False:
            fields.pop("package_manager")
        return cls(**fields)

    # ------------------------------------------------------------------
    # Template context
    # ------------------------------------------------------------------

    def template_context(self) -> dict[str, Any]:
        """Return the variables templates may reference.

        Only these names are available inside ``<%= ... %>`` expressions.
        """
        return {
            "package_name": self.package_name,
            "product_name": self.product_name,
            "description": self.description,
            "author": self.author,
            "license": self.license,
            "repository_type": self.repository_type,
            "repository_url": self.repository_url,
            "homepage": self.homepage,
            "bugs": self.bugs,
            "quasar_version": self.quasar_version,
            "script_type": self.script_type,
            "preset": {**dict.fromkeys(PRESET_FEATURES, False), **to_flag_map(self.preset)},
            "package_manager": self.package_manager or "",
        }
