"""Backend source and configuration synthesis.

Renders the fixed set of files added on top of the provider's template: an
API stub, an access-control policy, an integration test for the stub, and
one configuration profile per environment.

Profiles:

* ``application.properties`` -- port, active profile (``dev`` unless
  ``SPRING_PROFILES_ACTIVE`` says otherwise), JPA and logging defaults.
* ``application-dev.properties`` -- networked database with defaults for
  every variable, schema auto-update, SQL logging on.
* ``application-test.properties`` -- in-memory H2, schema created and
  dropped per run, SQL logging and console off.
* ``application-prod.properties`` -- networked database whose name and
  credentials have no defaults, schema validation only, no SQL init.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any

from stackseed.config import ProjectSpec
from stackseed.scaffolder.templates import GeneratedFile, TemplateRenderer

PROFILES: tuple[str, ...] = ("default", "dev", "test", "prod")


def profile_file_name(profile: str) -> str:
    if profile == "default":
        return "application.properties"
    return f"application-{profile}.properties"


class BackendGenerator:
    """Generates the backend's first-class source and configuration files."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def build_files(self, spec: ProjectSpec, context: dict[str, Any]) -> list[GeneratedFile]:
        """Render every backend file, relative to the backend project root.

        The order and content depend only on *spec* and *context*, so two
        runs with the same input produce byte-identical files.
        """
        main_pkg = PurePosixPath("src/main/java") / spec.package_path
        test_pkg = PurePosixPath("src/test/java") / spec.package_path
        resources = PurePosixPath("src/main/resources")

        sources = [
            ("backend/TestController.java.j2", main_pkg / "controller" / "TestController.java"),
            ("backend/SecurityConfig.java.j2", main_pkg / "config" / "SecurityConfig.java"),
            (
                "backend/TestControllerIntegrationTest.java.j2",
                test_pkg / "controller" / "TestControllerIntegrationTest.java",
            ),
        ]
        profiles = [
            (f"backend/{profile_file_name(p)}.j2", resources / profile_file_name(p))
            for p in PROFILES
        ]
        return [
            self.renderer.render_file(template, relative, context, step="synthesize")
            for template, relative in sources + profiles
        ]

    async def generate(
        self,
        project: Path,
        spec: ProjectSpec,
        context: dict[str, Any],
    ) -> list[Path]:
        """Render and write every backend file under *project*.

        Returns:
            List of written file paths.
        """
        written: list[Path] = []
        for generated in self.build_files(spec, context):
            written.append(await generated.write(project, step="synthesize"))
        return written
