"""Main scaffolding orchestrator.

Takes a ``Config`` and generates the complete two-service project: a Spring
Boot backend fetched from the template provider and enriched locally, a
static nginx frontend, and the compose file that runs both next to a
PostgreSQL database.

The steps run strictly one after the other and the first failure aborts the
rest. Paths are passed explicitly from step to step; nothing depends on the
process working directory.

A failed run is not cleaned up. Re-running with the same output base stops
at ``layout`` because the partial project already exists, so a retry of the
same inputs needs the partial tree removed (or a fresh base) to reach the
step that failed before.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from stackseed.config import Config
from stackseed.errors import VersionInvalidError
from stackseed.initializr_client import InitializrClient
from stackseed.utils import print_info, print_step_header, print_warning, relative_to_root

from .backend_gen import BackendGenerator
from .docker_gen import DockerGenerator, build_service_descriptors
from .fetcher import TemplateFetcher
from .frontend_gen import FrontendGenerator
from .installer import ArchiveInstaller
from .layout import create_layout, plan_layout
from .templates import TemplateRenderer
from .versions import VersionCheck, VersionStatus, VersionValidator


class GenerationResult(BaseModel):
    """What a successful run produced."""

    project_root: Path
    files: list[Path] = Field(default_factory=list)
    removed: list[Path] = Field(default_factory=list)
    version_check: VersionCheck | None = None


class ProjectGenerator:
    """Runs the project assembly pipeline.

    Validate -> layout -> fetch -> install/clean -> backend files ->
    container descriptors -> frontend -> frontend patch.
    """

    def __init__(self, config: Config, client: InitializrClient | None = None) -> None:
        self.config = config
        self.client = client or InitializrClient.from_config(config.initializr)
        self.renderer = TemplateRenderer()
        self.validator = VersionValidator(self.client)
        self.fetcher = TemplateFetcher(self.client)
        self.installer = ArchiveInstaller(self.renderer)
        self.backend_gen = BackendGenerator(self.renderer)
        self.docker_gen = DockerGenerator(self.renderer)
        self.frontend_gen = FrontendGenerator(self.renderer)

    @property
    def validation_enabled(self) -> bool:
        return self.config.validate_version and bool(self.config.initializr.metadata_path)

    # -- Public API --------------------------------------------------------

    async def generate(self) -> GenerationResult:
        """Generate the project under ``<output_base>/<name>``.

        Returns:
            A ``GenerationResult`` listing every file written.

        Raises:
            GenerationError: The first failure of any step.
        """
        spec = self.config.spec
        context = self.config.template_context()

        # 1. Template revision
        print_step_header("validate")
        version_check = await self._validate_version()

        # 2. Directory layout
        print_step_header("layout")
        plan = plan_layout(spec)
        await create_layout(plan)
        print_info(f"Project directories created at {plan.project_root}")
        result = GenerationResult(project_root=plan.project_root, version_check=version_check)

        # 3. Backend template
        print_step_header("fetch")
        print_info(f"Requesting {spec.project_type} ({spec.request_boot_version}) from {self.client.base_url}")
        archive = await self.fetcher.fetch(spec, plan.archive_path)

        # 4. Extract and clean
        print_step_header("install")
        project = await self.installer.install(archive, plan.backend_root, spec)
        result.removed = await self.installer.clean(project, spec)
        for path in result.removed:
            print_info(f"Removed {relative_to_root(path, plan.project_root)}")
        result.files.append(project / ".gitignore")

        # 5. Backend sources and profiles
        print_step_header("synthesize")
        result.files.extend(await self.backend_gen.generate(project, spec, context))

        # 6. Dockerfiles and compose file
        print_step_header("containers")
        services = build_service_descriptors(self.config)
        descriptors = await self.docker_gen.generate_all(plan, context, services)
        result.files.extend(descriptors.values())

        # 7. Static frontend
        print_step_header("frontend")
        result.files.extend(await self.frontend_gen.generate(plan.frontend_root, context))

        # 8. Point the frontend at the published backend port
        print_step_header("patch")
        script = await self.frontend_gen.patch_script(
            plan.frontend_root, context["api_test_path"], self.config.backend_public_url
        )
        print_info(f"{relative_to_root(script, plan.project_root)} now calls {self.config.backend_public_url}")

        return result

    # -- Steps -------------------------------------------------------------

    async def _validate_version(self) -> VersionCheck | None:
        revision = self.config.spec.boot_version
        if not self.validation_enabled:
            print_warning("Template revision validation disabled - skipping")
            return None

        check = await self.validator.validate(revision)
        if check.status is VersionStatus.INVALID:
            raise VersionInvalidError(revision, check.valid_versions)
        if check.status is VersionStatus.UNKNOWN:
            print_warning(f"Could not fetch revision metadata ({check.reason}) - skipping validation")
        else:
            print_info(f"Template revision {revision} is available")
        return check
