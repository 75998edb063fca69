"""stackseed scaffolder -- assembles the two-service project tree.

Takes a ``Config`` and renders a Spring Boot backend (fetched from the
template provider, then cleaned and enriched), a static nginx frontend and
the Docker Compose file that runs both with PostgreSQL.

Quick usage::

    from stackseed.config import Config
    from stackseed.scaffolder import ProjectGenerator

    config = Config.from_env("demo")
    result = await ProjectGenerator(config).generate()
"""

from stackseed.scaffolder.generator import GenerationResult, ProjectGenerator
from stackseed.scaffolder.templates import GeneratedFile, TemplateRenderer

__all__ = [
    "GeneratedFile",
    "GenerationResult",
    "ProjectGenerator",
    "TemplateRenderer",
]
