"""Invocation of the external build/run script.

The script compiles the agent to WASM and runs it through the host, which
reads the request file and writes the response file.  :class:`BuildInvoker`
is the seam the chat session depends on, so tests can substitute a fake.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from wasp.config import ChatConfig
from wasp.errors import ExternalProcessError
from wasp.utils import run_command


@dataclass(frozen=True)
class BuildOutput:
    """Captured output streams of one build/run invocation."""

    stdout: str = ""
    stderr: str = ""


class BuildInvoker(Protocol):
    async def invoke_build(self, request_path: Path, response_path: Path) -> BuildOutput:
        """Build and run the agent against *request_path*.

        Raises:
            ExternalProcessError: If the build or the run failed.
        """
        ...


class ShellBuildInvoker:
    """Runs the configured shell command and waits for it without a timeout.

    A non-zero exit is tolerated when stderr contains the configured
    compiling marker: cargo reports progress on stderr, and the script may
    exit non-zero after a build that still produced a response.
    """

    def __init__(self, config: ChatConfig | None = None, cwd: str | Path | None = None) -> None:
        self.config = config or ChatConfig()
        self.cwd = cwd

    def is_benign_failure(self, stderr: str) -> bool:
        marker = self.config.compiling_marker
        return bool(marker) and marker in stderr

    async def invoke_build(self, request_path: Path, response_path: Path) -> BuildOutput:
        command = self.config.build_command
        try:
            returncode, stdout, stderr = await run_command(
                command,
                cwd=self.cwd,
                env={
                    "WASP_INPUT_PATH": str(request_path),
                    "WASP_OUTPUT_PATH": str(response_path),
                },
            )
        except OSError as exc:
            raise ExternalProcessError(command, -1, str(exc)) from exc

        if returncode != 0 and not self.is_benign_failure(stderr):
            raise ExternalProcessError(command, returncode, stderr)
        return BuildOutput(stdout=stdout, stderr=stderr)
