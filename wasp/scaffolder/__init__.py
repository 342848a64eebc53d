"""WASP scaffolder -- creates new WASM agent projects from a template.

Quick usage::

    from wasp.scaffolder import ProjectGenerator, ScaffoldAnswers

    answers = ScaffoldAnswers(project_name="my-agent")
    project_path = await ProjectGenerator().create(answers)
"""

from wasp.scaffolder.generator import (
    ProjectGenerator,
    ScaffoldAnswers,
    Template,
    validate_project_name,
)
from wasp.scaffolder.prerequisites import check_prerequisites
from wasp.scaffolder.updates import check_for_updates

__all__ = [
    "ProjectGenerator",
    "ScaffoldAnswers",
    "Template",
    "check_for_updates",
    "check_prerequisites",
    "validate_project_name",
]
