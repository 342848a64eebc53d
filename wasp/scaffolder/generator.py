"""Project scaffolding for WASM agent projects.

Takes a ``ScaffoldAnswers`` and produces a ready-to-build agent project:
the template tree is copied into ``<cwd>/<project_name>``, the Rust manifest
is renamed after the project, and the version-control, dependency and
toolchain setup commands are run in order.

Every step is a precondition for the next one.  The first failure aborts the
run and nothing that was already written is cleaned up.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from wasp.config import ScaffoldConfig
from wasp.errors import ExternalProcessError, FilesystemError, ProjectNameError
from wasp.utils import console, format_command, print_success, run_command

PROJECT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

DEFAULT_PROJECT_NAME = "my-uomi-agent"

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]


def validate_project_name(name: str) -> str:
    """Return *name* unchanged if it is a valid project name.

    Raises:
        ProjectNameError: If *name* is empty or contains anything other than
            letters, digits, underscores and hyphens.
    """
    if not PROJECT_NAME_PATTERN.match(name):
        raise ProjectNameError(name)
    return name


# ---------------------------------------------------------------------------
# Answers model
# ---------------------------------------------------------------------------


class Template(str, Enum):
    """Available project templates."""

    LLM_CHAT = "LLM Chat"

    @property
    def directory(self) -> str:
        """Name of the template directory under the template root."""
        return _TEMPLATE_DIRECTORIES[self]


_TEMPLATE_DIRECTORIES: dict[Template, str] = {
    Template.LLM_CHAT: "agent",
}


class ScaffoldAnswers(BaseModel):
    """What the user chose at the interactive prompts."""

    project_name: str = Field(default=DEFAULT_PROJECT_NAME)
    template: Template = Field(default=Template.LLM_CHAT)

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        return validate_project_name(value)


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Creates a new agent project from a template.

    Args:
        config: Scaffolding settings (template location, manifest layout,
            toolchain target).
        cwd: Directory in which the project directory is created.  Defaults
            to the process working directory.
        run: Coroutine used to execute setup commands.  Must accept the same
            arguments as :func:`wasp.utils.run_command`.
    """

    def __init__(
        self,
        config: ScaffoldConfig | None = None,
        cwd: str | Path | None = None,
        run: CommandRunner = run_command,
    ) -> None:
        self.config = config or ScaffoldConfig()
        self.cwd = Path(cwd) if cwd is not None else Path.cwd()
        self.run = run

    # -- Public API --------------------------------------------------------

    async def create(self, answers: ScaffoldAnswers) -> Path:
        """Scaffold a project and return the path to its root.

        Raises:
            ProjectNameError: The name is invalid; nothing was touched.
            FilesystemError: The directory could not be created, the template
                could not be copied or the manifest could not be rewritten.
            ExternalProcessError: A setup command failed.
        """
        name = validate_project_name(answers.project_name)
        project_path = self.cwd / name
        template_path = self.config.template_dir / answers.template.directory

        with console.status("Setting up your project...") as status:
            await self._create_directory(project_path)
            await self._copy_template(template_path, project_path)

            status.update("Customizing project files...")
            await self._customize_manifest(project_path, name)

            status.update("Initializing git repository...")
            await self._run_step(["git", "init"], cwd=project_path)

            status.update("Installing dependencies...")
            await self._run_step(["npm", "install"], cwd=project_path)

            status.update("Setting up Rust environment...")
            await self._run_step(
                ["rustup", "target", "add", self.config.wasm_target], cwd=self.cwd
            )

        print_success("Project setup complete!")
        return project_path

    # -- Steps ---------------------------------------------------------------

    async def _create_directory(self, project_path: Path) -> None:
        try:
            await asyncio.to_thread(project_path.mkdir, parents=True)
        except FileExistsError as exc:
            raise FilesystemError(f"Directory already exists: {project_path}") from exc
        except OSError as exc:
            raise FilesystemError(f"Cannot create directory {project_path}: {exc}") from exc

    async def _copy_template(self, template_path: Path, project_path: Path) -> None:
        """Copy the template tree, then the stored gitignore as ``.gitignore``.

        The gitignore is kept without its leading dot inside the template so
        that packaging tools do not drop or apply it.
        """
        if not template_path.is_dir():
            raise FilesystemError(f"Template directory not found: {template_path}")

        gitignore = self.config.gitignore_source
        try:
            await asyncio.to_thread(
                shutil.copytree,
                template_path,
                project_path,
                ignore=shutil.ignore_patterns(gitignore, "__pycache__"),
                dirs_exist_ok=True,
            )
            await asyncio.to_thread(
                shutil.copyfile,
                template_path / gitignore,
                project_path / ".gitignore",
            )
        except (OSError, shutil.Error) as exc:
            raise FilesystemError(f"Cannot copy template into {project_path}: {exc}") from exc

    async def _customize_manifest(self, project_path: Path, name: str) -> None:
        manifest = project_path / self.config.manifest_dir / self.config.manifest_name
        try:
            text = await asyncio.to_thread(manifest.read_text, "utf-8")
            # Raw substring substitution, first occurrence only.
            text = text.replace(self.config.placeholder, name, 1)
            await asyncio.to_thread(manifest.write_text, text, "utf-8")
        except OSError as exc:
            raise FilesystemError(f"Cannot customize {manifest}: {exc}") from exc
        print_success("Project files customized")

    async def _run_step(self, cmd: list[str], cwd: Path) -> None:
        command = format_command(cmd)
        try:
            returncode, _stdout, stderr = await self.run(cmd, cwd=cwd)
        except OSError as exc:
            raise ExternalProcessError(command, -1, str(exc)) from exc
        if returncode != 0:
            raise ExternalProcessError(command, returncode, stderr)
