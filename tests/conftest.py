"""Shared pytest fixtures for the WASP test suite.

Provides reusable fixtures for:
- A small on-disk project template
- A recording command runner for scaffolding steps
- A fake build invoker and chat config pointing into ``tmp_path``
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from wasp.chat.runner import BuildOutput
from wasp.config import ChatConfig, ScaffoldConfig
from wasp.errors import ExternalProcessError


# ---------------------------------------------------------------------------
# Scaffolding
# ---------------------------------------------------------------------------

@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Template root with a minimal ``agent`` template."""
    root = tmp_path / "templates"
    agent = root / "agent"
    (agent / "agent-template" / "src").mkdir(parents=True)
    (agent / "bin").mkdir()
    (agent / "gitignore").write_text("target/\nnode_modules/\n", encoding="utf-8")
    (agent / "package.json").write_text('{"name": "uomi-agent"}\n', encoding="utf-8")
    (agent / "bin" / "build_and_run_host.sh").write_text("#!/bin/sh\n", encoding="utf-8")
    (agent / "agent-template" / "Cargo.toml").write_text(
        '[package]\nname = "agent-template"\nversion = "0.1.0"\n',
        encoding="utf-8",
    )
    (agent / "agent-template" / "src" / "lib.rs").write_text("", encoding="utf-8")
    return root


@pytest.fixture
def scaffold_config(template_dir: Path) -> ScaffoldConfig:
    return ScaffoldConfig(template_dir=template_dir, check_updates=False)


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    """Directory the project is created in."""
    path = tmp_path / "work"
    path.mkdir()
    return path


class RecordingRunner:
    """Stand-in for ``run_command`` that records every call.

    ``results`` maps the first word of a command to the
    ``(returncode, stdout, stderr)`` it should return.
    """

    def __init__(self, results: dict[str, tuple[int, str, str]] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[list[str], Path | None]] = []

    async def __call__(self, cmd: list[str], cwd: Path | None = None, **kwargs: Any):
        self.calls.append((list(cmd), cwd))
        return self.results.get(cmd[0], (0, "", ""))

    @property
    def commands(self) -> list[str]:
        return [" ".join(cmd) for cmd, _ in self.calls]


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

@pytest.fixture
def chat_config(tmp_path: Path) -> ChatConfig:
    return ChatConfig(
        input_path=tmp_path / "host" / "src" / "input.txt",
        output_path=tmp_path / "host" / "src" / "output.txt",
    )


class FakeInvoker:
    """Build invoker that writes a canned response instead of running cargo."""

    def __init__(
        self,
        response: str | bytes | None = None,
        stdout: str = "",
        stderr: str = "",
        error: Exception | None = None,
    ) -> None:
        self.response = response
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.requests: list[Any] = []

    async def invoke_build(self, request_path: Path, response_path: Path) -> BuildOutput:
        self.requests.append(json.loads(Path(request_path).read_text(encoding="utf-8")))
        if self.error is not None:
            raise self.error
        if isinstance(self.response, bytes):
            Path(response_path).write_bytes(self.response)
        elif self.response is not None:
            Path(response_path).write_text(self.response, encoding="utf-8")
        return BuildOutput(stdout=self.stdout, stderr=self.stderr)


@pytest.fixture
def native_response() -> str:
    return json.dumps({
        "response": "Hello, I am UOMI Agent.",
        "time_taken": 1.234,
        "tokens_per_second": 41.6,
        "total_tokens_generated": 52,
    })


@pytest.fixture
def openai_response() -> str:
    return json.dumps({
        "id": "chatcmpl-1",
        "model": "llama-3.1-8b",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": "Hi there!"}},
        ],
        "usage": {
            "prompt_tokens": 12,
            "completion_tokens": 4,
            "total_tokens": 16,
            "total_time": 0.5,
        },
    })


@pytest.fixture
def failing_invoker() -> FakeInvoker:
    return FakeInvoker(
        error=ExternalProcessError("sh ./bin/build_and_run_host.sh", 101, "error[E0425]: oops"),
    )


@pytest.fixture
def make_invoker() -> type[FakeInvoker]:
    """Factory for ``FakeInvoker`` instances with custom canned output."""
    return FakeInvoker


@pytest.fixture
def make_runner() -> type[RecordingRunner]:
    """Factory for ``RecordingRunner`` instances with custom results."""
    return RecordingRunner
