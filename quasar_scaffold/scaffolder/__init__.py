"""quasar-scaffold scaffolder -- renders new projects and toggles BEX support.

Quick usage::

    from quasar_scaffold.config import ProjectConfig
    from quasar_scaffold.scaffolder import ProjectGenerator

    config = ProjectConfig.from_answers({"project_folder": "my-app"})
    project_path = await ProjectGenerator(config).generate()
"""

from quasar_scaffold.scaffolder.bex import BexInstaller
from quasar_scaffold.scaffolder.generator import ProjectGenerator, print_final_message
from quasar_scaffold.scaffolder.guard import ensure_outside_project
from quasar_scaffold.scaffolder.prompts import PromptOrchestrator, Question
from quasar_scaffold.scaffolder.templates import FileKind, TemplateRenderer

__all__ = [
    "BexInstaller",
    "FileKind",
    "ProjectGenerator",
    "PromptOrchestrator",
    "Question",
    "TemplateRenderer",
    "ensure_outside_project",
    "print_final_message",
]
