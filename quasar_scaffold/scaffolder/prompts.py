"""Interactive questionnaire built on ``rich.prompt``.

Questions are declared as :class:`Question` models and asked in order by
:class:`PromptOrchestrator`.  Answers are collected into a plain dict keyed
by question name, which is later validated into a ``ProjectConfig``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Literal

from pydantic import BaseModel, ConfigDict, Field
from rich.prompt import Confirm, Prompt

from quasar_scaffold.errors import ScaffoldCancelled
from quasar_scaffold.utils import (
    console,
    escape_string,
    get_git_user,
    infer_package_name,
    is_valid_package_name,
    print_error,
)


# ---------------------------------------------------------------------------
# Question model
# ---------------------------------------------------------------------------


class Choice(BaseModel):
    """One option of a ``select`` or ``multiselect`` question."""

    title: str
    value: Any
    description: str = ""


class Question(BaseModel):
    """Declarative description of a single prompt.

    ``initial`` may be a value or a callable receiving the answers collected
    so far.  ``validate`` returns ``True`` or an error message; on error the
    same question is asked again.  ``format`` transforms the accepted answer
    before it is stored.  ``when`` decides whether the question is asked at
    all.
    """

    name: str
    message: str
    type: Literal["text", "confirm", "select", "multiselect"] = "text"
    initial: Any = None
    choices: list[Choice] = Field(default_factory=list)
    validate_answer: Callable[[Any], bool | str] | None = Field(default=None, alias="validate")
    format_answer: Callable[[Any], Any] | None = Field(default=None, alias="format")
    when: Callable[[dict[str, Any]], bool] | None = None

    model_config = ConfigDict(populate_by_name=True)

    def resolve_initial(self, answers: dict[str, Any]) -> Any:
        if callable(self.initial):
            return self.initial(answers)
        return self.initial


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class PromptOrchestrator:
    """Asks a sequence of questions and merges the answers.

    Any question whose name is already present in the answers dict is
    skipped, so CLI flags can pre-answer parts of the questionnaire.
    """

    def __init__(self) -> None:
        self.console = console

    def ask(
        self,
        questions: list[Question],
        answers: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Ask *questions* in order and return the merged answers.

        Raises:
            ScaffoldCancelled: If the user presses Ctrl-C or closes stdin.
        """
        answers = dict(answers or {})
        for question in questions:
            if question.name in answers:
                continue
            if question.when is not None and not question.when(answers):
                continue
            try:
                value = self._ask_until_valid(question, answers)
            except (KeyboardInterrupt, EOFError) as exc:
                self.console.print()
                raise ScaffoldCancelled() from exc
            answers[question.name] = value
        return answers

    def _ask_until_valid(self, question: Question, answers: dict[str, Any]) -> Any:
        while True:
            value = self._ask_one(question, answers)
            if question.type == "multiselect" and None in value:
                print_error("Pick numbers from the list above")
                continue
            if question.validate_answer is not None:
                verdict = question.validate_answer(value)
                if verdict is not True:
                    print_error(verdict if isinstance(verdict, str) else "Invalid value")
                    continue
            if question.format_answer is not None:
                value = question.format_answer(value)
            return value

    def _ask_one(self, question: Question, answers: dict[str, Any]) -> Any:
        initial = question.resolve_initial(answers)

        if question.type == "confirm":
            return Confirm.ask(
                question.message,
                default=bool(initial),
                console=self.console,
            )

        if question.type == "select":
            self._print_choices(question)
            index = initial if isinstance(initial, int) else 0
            picked = Prompt.ask(
                question.message,
                choices=[str(i) for i in range(1, len(question.choices) + 1)],
                default=str(index + 1),
                console=self.console,
            )
            return question.choices[int(picked) - 1].value

        if question.type == "multiselect":
            self._print_choices(question)
            raw = Prompt.ask(
                f"{question.message} (comma-separated numbers)",
                default=_format_selection(question, initial),
                console=self.console,
            )
            return _parse_selection(question, raw)

        if initial is None:
            return Prompt.ask(question.message, default="", console=self.console)
        return Prompt.ask(question.message, default=str(initial), console=self.console)

    def _print_choices(self, question: Question) -> None:
        for number, choice in enumerate(question.choices, start=1):
            suffix = f" [dim]({choice.description})[/dim]" if choice.description else ""
            self.console.print(f"  [cyan]{number}[/cyan]) {choice.title}{suffix}")


def _format_selection(question: Question, initial: Any) -> str:
    if not initial:
        return ""
    values = [choice.value for choice in question.choices]
    return ",".join(str(values.index(value) + 1) for value in initial if value in values)


def _parse_selection(question: Question, raw: str) -> list[Any]:
    """Map ``"1,3"`` to the values of choices 1 and 3.

    Out-of-range or non-numeric entries come back as ``None`` so the caller
    can ask again.
    """
    selected: list[Any] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= len(question.choices):
            selected.append(None)
            continue
        value = question.choices[int(part) - 1].value
        if value not in selected:
            selected.append(value)
    return selected


# ---------------------------------------------------------------------------
# Common questions
# ---------------------------------------------------------------------------

QUASAR_VERSIONS = [
    Choice(title="Quasar v2 (Vue 3 | latest and greatest)", value="v2", description="recommended"),
    Choice(title="Quasar v1 (Vue 2)", value="v1"),
]

SCRIPT_TYPES = [
    Choice(title="Javascript", value="js"),
    Choice(title="Typescript", value="ts"),
]

COMMON_PROMPTS: dict[str, Question] = {
    "quasar_version": Question(
        name="quasar_version",
        type="select",
        message="Pick Quasar version:",
        initial=0,
        choices=QUASAR_VERSIONS,
    ),
    "script_type": Question(
        name="script_type",
        type="select",
        message="Pick script type:",
        initial=0,
        choices=SCRIPT_TYPES,
    ),
    "product_name": Question(
        name="product_name",
        message="Project product name: (must start with letter if building mobile apps)",
        initial="Quasar App",
        validate=lambda val: bool(val) or "Invalid product name",
    ),
    "description": Question(
        name="description",
        message="Project description:",
        initial="A Quasar Project",
        format=escape_string,
        validate=lambda val: len(val) > 0 or "Invalid project description",
    ),
    "author": Question(
        name="author",
        message="Author:",
        initial=lambda answers: get_git_user(),
    ),
    "license": Question(
        name="license",
        message="License type",
        initial="MIT",
    ),
    "repository_type": Question(
        name="repository_type",
        message="Repository type:",
        initial="git",
    ),
    "repository_url": Question(
        name="repository_url",
        message="Repository URL: (eg https://github.com/quasarframework/quasar)",
    ),
    "homepage": Question(
        name="homepage",
        message="Homepage URL:",
    ),
    "bugs": Question(
        name="bugs",
        message="Issue reporting URL: (eg https://github.com/quasarframework/quasar/issues)",
    ),
}


# ---------------------------------------------------------------------------
# Application questionnaire
# ---------------------------------------------------------------------------

PRESET_CHOICES = [
    Choice(title="Linting (ESLint)", value="eslint", description="recommended"),
    Choice(title="State Management (Pinia)", value="pinia"),
    Choice(title="Axios", value="axios"),
    Choice(title="Vue-i18n", value="i18n"),
]

PACKAGE_MANAGER_CHOICES = [
    Choice(title="Yes, use Yarn", value="yarn", description="recommended"),
    Choice(title="Yes, use NPM", value="npm"),
    Choice(title="Yes, use PNPM", value="pnpm"),
    Choice(title="No, I will handle that myself", value=False),
]


def _folder_is_populated(answers: dict[str, Any]) -> bool:
    folder = Path(str(answers.get("project_folder", "")).strip() or ".")
    return folder.is_dir() and any(folder.iterdir())


def _folder_name(answers: dict[str, Any]) -> str:
    return Path(str(answers["project_folder"]).strip()).resolve().name


def build_app_questions() -> list[Question]:
    """Return the questionnaire for creating a new application."""
    return [
        Question(
            name="project_folder",
            message="Project folder:",
            initial="quasar-project",
            validate=lambda val: bool(str(val).strip()) or "Invalid project folder",
        ),
        Question(
            name="overwrite",
            type="confirm",
            message="Directory not empty. Remove existing files and continue?",
            initial=False,
            when=_folder_is_populated,
        ),
        Question(
            name="package_name",
            message="Package name:",
            initial=lambda answers: infer_package_name(_folder_name(answers)),
            validate=lambda val: is_valid_package_name(val) or "Invalid package.json name",
            when=lambda answers: not is_valid_package_name(_folder_name(answers)),
        ),
        COMMON_PROMPTS["quasar_version"],
        COMMON_PROMPTS["script_type"],
        COMMON_PROMPTS["product_name"],
        COMMON_PROMPTS["description"],
        COMMON_PROMPTS["author"],
        Question(
            name="preset",
            type="multiselect",
            message="Check the features needed for your project:",
            initial=["eslint"],
            choices=PRESET_CHOICES,
        ),
        Question(
            name="package_manager",
            type="select",
            message="Install project dependencies? (recommended)",
            initial=0,
            choices=PACKAGE_MANAGER_CHOICES,
        ),
    ]
