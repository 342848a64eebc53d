"""WASP configuration.

Typed configuration for both command-line tools. All settings use Pydantic v2
models so they can be validated at construction time and overridden from
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates"

_TRUTHY = ("1", "true", "yes", "on")


class ScaffoldConfig(BaseModel):
    """Settings for ``wasp create``."""

    template_dir: Path = Field(
        default=_DEFAULT_TEMPLATE_DIR,
        description="Directory holding one sub-directory per project template",
    )
    manifest_dir: str = Field(
        default="agent-template",
        description="Sub-directory of the copied tree that holds the Cargo manifest",
    )
    manifest_name: str = Field(default="Cargo.toml")
    placeholder: str = Field(
        default="agent-template",
        description="Literal package name replaced by the project name",
    )
    gitignore_source: str = Field(
        default="gitignore",
        description="Template file copied explicitly to ``.gitignore``",
    )
    wasm_target: str = Field(default="wasm32-unknown-unknown")
    min_node_major: int = Field(default=14, ge=1)
    check_updates: bool = Field(default=True)
    distribution: str = Field(default="uomi-wasp", description="Package name on PyPI")


class ChatConfig(BaseModel):
    """Settings for ``wasp-chat``."""

    input_path: Path = Field(default=Path("host") / "src" / "input.txt")
    output_path: Path = Field(default=Path("host") / "src" / "output.txt")
    build_command: str = Field(default="sh ./bin/build_and_run_host.sh")
    compiling_marker: str = Field(
        default="Compiling",
        description=(
            "A failing build is tolerated when its stderr contains this text. "
            "Empty means only the exit code counts."
        ),
    )


class Config(BaseModel):
    """Global WASP configuration.

    Created once by a CLI entry point and passed down to the scaffolder or the
    chat session.
    """

    scaffold: ScaffoldConfig = Field(default_factory=ScaffoldConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    debug: bool = Field(default=False, description="Print full tracebacks on failure")

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            WASP_TEMPLATE_DIR, WASP_NO_UPDATE_CHECK, WASP_INPUT_PATH,
            WASP_OUTPUT_PATH, WASP_BUILD_COMMAND, WASP_COMPILING_MARKER,
            WASP_DEBUG.
        """
        scaffold_kwargs: dict[str, Any] = {}
        if os.environ.get("WASP_TEMPLATE_DIR"):
            scaffold_kwargs["template_dir"] = Path(os.environ["WASP_TEMPLATE_DIR"])
        if os.environ.get("WASP_NO_UPDATE_CHECK", "").lower() in _TRUTHY:
            scaffold_kwargs["check_updates"] = False

        chat_kwargs: dict[str, Any] = {}
        if os.environ.get("WASP_INPUT_PATH"):
            chat_kwargs["input_path"] = Path(os.environ["WASP_INPUT_PATH"])
        if os.environ.get("WASP_OUTPUT_PATH"):
            chat_kwargs["output_path"] = Path(os.environ["WASP_OUTPUT_PATH"])
        if os.environ.get("WASP_BUILD_COMMAND"):
            chat_kwargs["build_command"] = os.environ["WASP_BUILD_COMMAND"]
        # An empty value is meaningful here: it disables the marker.
        if "WASP_COMPILING_MARKER" in os.environ:
            chat_kwargs["compiling_marker"] = os.environ["WASP_COMPILING_MARKER"]

        return cls(
            scaffold=ScaffoldConfig(**scaffold_kwargs),
            chat=ChatConfig(**chat_kwargs),
            debug=os.environ.get("WASP_DEBUG", "").lower() in _TRUTHY,
        )
