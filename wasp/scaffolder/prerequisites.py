"""Toolchain checks run before a project is scaffolded."""

from __future__ import annotations

import re

from wasp.errors import PrerequisiteError
from wasp.utils import run_command

REMEDIATION = [
    "Node.js 14 or higher (https://nodejs.org)",
    "Rust (https://rustup.rs)",
]

_VERSION_RE = re.compile(r"v?(\d+)\.")


def parse_node_major(version_output: str) -> int | None:
    """Extract the major version from ``node --version`` output (``v18.17.0``)."""
    match = _VERSION_RE.search(version_output.strip())
    if not match:
        return None
    return int(match.group(1))


async def _probe(cmd: list[str]) -> str:
    """Run a version command and return its stdout, or raise if it fails."""
    try:
        returncode, stdout, stderr = await run_command(cmd, timeout=30)
    except OSError as exc:
        raise PrerequisiteError(f"{cmd[0]} is not installed", REMEDIATION) from exc
    if returncode != 0:
        raise PrerequisiteError(
            f"`{' '.join(cmd)}` failed: {stderr.strip() or f'exit code {returncode}'}",
            REMEDIATION,
        )
    return stdout


async def check_prerequisites(min_node_major: int = 14) -> None:
    """Verify that Node.js, rustc and cargo are available.

    Raises:
        PrerequisiteError: On the first missing or outdated tool.  The error's
            ``remediation`` lists what to install.
    """
    node_version = await _probe(["node", "--version"])
    major = parse_node_major(node_version)
    if major is None or major < min_node_major:
        raise PrerequisiteError(
            f"Node.js {min_node_major} or higher is required (found {node_version.strip() or 'unknown'})",
            REMEDIATION,
        )

    await _probe(["rustc", "--version"])
    await _probe(["cargo", "--version"])
