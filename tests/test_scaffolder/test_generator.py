"""Tests for the project scaffolding generator.

Covers:
- Project name validation and the ScaffoldAnswers model
- Full project creation against a small template
- The explicit .gitignore copy and the manifest substitution
- Command order and working directories
- Fail-fast behaviour at every step
- The bundled build script in a project without a host
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from wasp.config import ScaffoldConfig
from wasp.errors import ExternalProcessError, FilesystemError, ProjectNameError
from wasp.scaffolder.generator import (
    DEFAULT_PROJECT_NAME,
    ProjectGenerator,
    ScaffoldAnswers,
    Template,
    validate_project_name,
)
from wasp.utils import run_command


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Name validation
# ---------------------------------------------------------------------------


class TestValidateProjectName:
    @pytest.mark.parametrize("name", ["my-agent", "agent_2", "A", "x-y_z-09"])
    def test_valid_names(self, name: str):
        assert validate_project_name(name) == name

    @pytest.mark.parametrize("name", ["", "my agent", "agent!", "../escape", "a/b", "ünï"])
    def test_invalid_names(self, name: str):
        with pytest.raises(ProjectNameError):
            validate_project_name(name)

    def test_error_mentions_name(self):
        with pytest.raises(ProjectNameError, match="bad name"):
            validate_project_name("bad name")


class TestScaffoldAnswers:
    def test_defaults(self):
        answers = ScaffoldAnswers()
        assert answers.project_name == DEFAULT_PROJECT_NAME
        assert answers.template is Template.LLM_CHAT

    def test_template_from_label(self):
        answers = ScaffoldAnswers(project_name="x", template="LLM Chat")
        assert answers.template is Template.LLM_CHAT
        assert answers.template.directory == "agent"

    def test_invalid_name_rejected(self):
        with pytest.raises(ValidationError):
            ScaffoldAnswers(project_name="no spaces allowed")

    def test_unknown_template_rejected(self):
        with pytest.raises(ValidationError):
            ScaffoldAnswers(project_name="x", template="Image Gen")


# ---------------------------------------------------------------------------
# Successful creation
# ---------------------------------------------------------------------------


class TestProjectGeneratorCreate:
    @pytest.mark.asyncio
    async def test_creates_project_tree(self, scaffold_config, workdir, recording_runner):
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="my-agent"))

        assert project == workdir / "my-agent"
        assert (project / "package.json").exists()
        assert (project / "bin" / "build_and_run_host.sh").exists()
        assert (project / "agent-template" / "src" / "lib.rs").exists()

    @pytest.mark.asyncio
    async def test_gitignore_copied_as_dotfile(self, scaffold_config, workdir, recording_runner):
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="my-agent"))

        assert (project / ".gitignore").read_text(encoding="utf-8") == "target/\nnode_modules/\n"
        assert not (project / "gitignore").exists()

    @pytest.mark.asyncio
    async def test_manifest_placeholder_replaced(self, scaffold_config, workdir, recording_runner):
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="weather_bot"))

        manifest = (project / "agent-template" / "Cargo.toml").read_text(encoding="utf-8")
        assert 'name = "weather_bot"' in manifest
        assert "agent-template" not in manifest

    @pytest.mark.asyncio
    async def test_only_first_placeholder_replaced(self, template_dir, workdir, recording_runner):
        manifest = template_dir / "agent" / "agent-template" / "Cargo.toml"
        manifest.write_text(
            '[package]\nname = "agent-template"\n# agent-template docs\n',
            encoding="utf-8",
        )
        config = ScaffoldConfig(template_dir=template_dir)
        gen = ProjectGenerator(config, cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="bot"))

        text = (project / "agent-template" / "Cargo.toml").read_text(encoding="utf-8")
        assert text == '[package]\nname = "bot"\n# agent-template docs\n'

    @pytest.mark.asyncio
    async def test_commands_run_in_order(self, scaffold_config, workdir, recording_runner):
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="my-agent"))

        assert recording_runner.commands == [
            "git init",
            "npm install",
            "rustup target add wasm32-unknown-unknown",
        ]
        cwds = [cwd for _, cwd in recording_runner.calls]
        assert cwds == [project, project, workdir]

    @pytest.mark.asyncio
    async def test_template_is_not_modified(self, scaffold_config, template_dir, workdir, recording_runner):
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)
        await gen.create(ScaffoldAnswers(project_name="my-agent"))

        manifest = template_dir / "agent" / "agent-template" / "Cargo.toml"
        assert 'name = "agent-template"' in manifest.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_bundled_template_scaffolds(self, workdir, recording_runner):
        gen = ProjectGenerator(ScaffoldConfig(), cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="bundled"))

        assert (project / ".gitignore").exists()
        manifest = (project / "agent-template" / "Cargo.toml").read_text(encoding="utf-8")
        assert 'name = "bundled"' in manifest


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestProjectGeneratorFailures:
    @pytest.mark.asyncio
    async def test_invalid_name_has_no_side_effects(self, scaffold_config, workdir, recording_runner):
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)
        answers = ScaffoldAnswers.model_construct(
            project_name="bad name", template=Template.LLM_CHAT
        )

        with pytest.raises(ProjectNameError):
            await gen.create(answers)

        assert list(workdir.iterdir()) == []
        assert recording_runner.calls == []

    @pytest.mark.asyncio
    async def test_existing_directory_rejected(self, scaffold_config, workdir, recording_runner):
        (workdir / "taken").mkdir()
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)

        with pytest.raises(FilesystemError, match="already exists"):
            await gen.create(ScaffoldAnswers(project_name="taken"))

        assert recording_runner.calls == []

    @pytest.mark.asyncio
    async def test_missing_template(self, tmp_path, workdir, recording_runner):
        config = ScaffoldConfig(template_dir=tmp_path / "nowhere")
        gen = ProjectGenerator(config, cwd=workdir, run=recording_runner)

        with pytest.raises(FilesystemError, match="Template directory not found"):
            await gen.create(ScaffoldAnswers(project_name="p"))

        assert recording_runner.calls == []

    @pytest.mark.asyncio
    async def test_missing_manifest(self, scaffold_config, template_dir, workdir, recording_runner):
        (template_dir / "agent" / "agent-template" / "Cargo.toml").unlink()
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=recording_runner)

        with pytest.raises(FilesystemError, match="Cargo.toml"):
            await gen.create(ScaffoldAnswers(project_name="p"))

        # Partially created files stay behind.
        assert (workdir / "p" / "package.json").exists()
        assert recording_runner.calls == []

    @pytest.mark.asyncio
    async def test_git_failure_stops_before_npm(self, scaffold_config, workdir, make_runner):
        runner = make_runner({"git": (128, "", "fatal: not permitted")})
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=runner)

        with pytest.raises(ExternalProcessError) as exc_info:
            await gen.create(ScaffoldAnswers(project_name="p"))

        assert exc_info.value.returncode == 128
        assert exc_info.value.command == "git init"
        assert "fatal: not permitted" in str(exc_info.value)
        assert runner.commands == ["git init"]

    @pytest.mark.asyncio
    async def test_npm_failure_stops_before_rustup(self, scaffold_config, workdir, make_runner):
        runner = make_runner({"npm": (1, "", "ERR! network")})
        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=runner)

        with pytest.raises(ExternalProcessError):
            await gen.create(ScaffoldAnswers(project_name="p"))

        assert runner.commands == ["git init", "npm install"]
        assert (workdir / "p" / ".gitignore").exists()

    @pytest.mark.asyncio
    async def test_missing_binary_becomes_process_error(self, scaffold_config, workdir):
        async def runner(cmd, cwd=None, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        gen = ProjectGenerator(scaffold_config, cwd=workdir, run=runner)

        with pytest.raises(ExternalProcessError) as exc_info:
            await gen.create(ScaffoldAnswers(project_name="p"))

        assert exc_info.value.returncode == -1
        assert exc_info.value.command == "git init"


# ---------------------------------------------------------------------------
# Bundled template
# ---------------------------------------------------------------------------


class TestBundledTemplate:
    @pytest.mark.asyncio
    async def test_build_script_reports_missing_host(self, workdir, recording_runner):
        gen = ProjectGenerator(ScaffoldConfig(), cwd=workdir, run=recording_runner)
        project = await gen.create(ScaffoldAnswers(project_name="fresh-agent"))

        returncode, _, stderr = await run_command(
            "sh ./bin/build_and_run_host.sh", cwd=project, timeout=30
        )

        assert returncode == 1
        assert "no host found" in stderr
        assert "Compiling" not in stderr
