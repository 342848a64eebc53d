"""``wasp`` command-line entry point.

Usage::

    wasp create
"""

from __future__ import annotations

import asyncio
import sys

from rich.prompt import Prompt

from wasp import __version__
from wasp.config import Config
from wasp.errors import PrerequisiteError, ProjectNameError, WaspError
from wasp.scaffolder import (
    ProjectGenerator,
    ScaffoldAnswers,
    Template,
    check_for_updates,
    check_prerequisites,
    validate_project_name,
)
from wasp.scaffolder.generator import DEFAULT_PROJECT_NAME
from wasp.utils import (
    console,
    print_error,
    print_header,
    print_success,
    print_warning,
    report_unhandled,
)

USAGE = """
[yellow]Usage: wasp create[/yellow]

[cyan]Available commands:[/cyan]
  create    Create a new UOMI agent project
"""


def prompt_answers() -> ScaffoldAnswers:
    """Ask for the project name and template until the answers are valid."""
    while True:
        name = Prompt.ask("What is your project name?", default=DEFAULT_PROJECT_NAME)
        try:
            validate_project_name(name)
            break
        except ProjectNameError as exc:
            print_error(str(exc))

    choice = Prompt.ask(
        "Which template would you like to use?",
        choices=[template.value for template in Template],
        default=Template.LLM_CHAT.value,
    )
    return ScaffoldAnswers(project_name=name, template=Template(choice))


async def _verify_prerequisites(config: Config) -> None:
    with console.status("Checking prerequisites..."):
        await check_prerequisites(config.scaffold.min_node_major)
    print_success("Prerequisites met!")


async def create_project(config: Config) -> None:
    """Run the interactive ``create`` flow end to end."""
    if config.scaffold.check_updates:
        await check_for_updates(__version__, config.scaffold.distribution)

    print_header("UOMI Agent Development Environment Setup", f"wasp {__version__}")
    await _verify_prerequisites(config)

    answers = await asyncio.to_thread(prompt_answers)
    await ProjectGenerator(config.scaffold).create(answers)

    console.print("\n[cyan]Next steps:[/cyan]")
    console.print(f"  1. cd {answers.project_name}")
    console.print("  2. npm run start\n")
    console.print("Start building your UOMI agent!")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``wasp``."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1 or args[0] != "create":
        console.print(USAGE)
        sys.exit(1)

    config = Config.from_env()
    try:
        asyncio.run(create_project(config))
    except PrerequisiteError as exc:
        print_error(f"Missing prerequisites: {exc}")
        print_warning("Please ensure you have installed:")
        for index, item in enumerate(exc.remediation, start=1):
            console.print(f"  {index}. {item}")
        sys.exit(1)
    except WaspError as exc:
        print_error("Error setting up project")
        print_error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        print_warning("Aborted.")
        sys.exit(1)
    except Exception as exc:
        report_unhandled(exc, show_traceback=config.debug)
        sys.exit(1)


if __name__ == "__main__":
    main()
