"""Dockerfile and Docker Compose generation.

One Dockerfile per service plus a single ``docker-compose.yml`` that wires
the database, backend and frontend together. The compose file is rendered
from ``ServiceDescriptor`` values, and before anything is written the
descriptors are checked against the files they refer to: the ports exposed
by each Dockerfile and the environment variables read by the backend's
configuration profiles must match the compose file exactly.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from stackseed.config import Config
from stackseed.errors import FileWriteError
from stackseed.scaffolder.backend_gen import profile_file_name
from stackseed.scaffolder.layout import LayoutPlan
from stackseed.scaffolder.templates import GeneratedFile, TemplateRenderer, compose_env_ref

NETWORK_NAME = "app-network"
NGINX_PORT = 80

_EXPOSE_PATTERN = re.compile(r"^EXPOSE\s+(\d+)", re.MULTILINE)
_PLACEHOLDER_NAME = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)")


class ServiceDescriptor(BaseModel):
    """One service of the compose file."""

    name: str
    image: str | None = Field(default=None, description="Image for services without a build")
    build_context: str | None = Field(default=None, description="Relative to the project root")
    container_port: int
    host_port: int | None = Field(default=None, description="None keeps the port internal")
    environment: dict[str, str] = Field(default_factory=dict)
    depends_on_healthy: list[str] = Field(default_factory=list)
    healthcheck: list[str] | None = None
    volumes: list[str] = Field(default_factory=list)
    profile: str | None = Field(default=None, description="Configuration profile the service runs")


def build_service_descriptors(config: Config) -> list[ServiceDescriptor]:
    """Describe the database, backend and frontend services."""
    spec = config.spec
    db = config.database
    ports = config.ports

    db_name = compose_env_ref(db.env_name, db.dev_name)
    db_user = compose_env_ref(db.env_user, db.dev_user)
    db_password = compose_env_ref(db.env_password, db.dev_password)

    database = ServiceDescriptor(
        name=db.service_name,
        image=db.image,
        container_port=ports.database,
        environment={
            db.env_name: db_name,
            db.env_user: db_user,
            db.env_password: db_password,
        },
        healthcheck=["CMD-SHELL", f"pg_isready -U {db_user} -d {db_name}"],
        volumes=[f"{db.volume_name}:/var/lib/postgresql/data"],
    )
    backend = ServiceDescriptor(
        name="backend",
        build_context=f"./{spec.name}_back/{spec.artifact_id}",
        container_port=ports.backend,
        host_port=ports.backend,
        environment={
            "SPRING_PROFILES_ACTIVE": "prod",
            db.env_host: db.service_name,
            db.env_port: str(ports.database),
            db.env_name: db_name,
            db.env_user: db_user,
            db.env_password: db_password,
        },
        depends_on_healthy=[db.service_name],
        profile="prod",
    )
    frontend = ServiceDescriptor(
        name="frontend",
        build_context=f"./{spec.name}_front",
        container_port=NGINX_PORT,
        host_port=ports.frontend,
    )
    return [database, backend, frontend]


class DockerGenerator:
    """Generates the service Dockerfiles and the compose file."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def build_files(
        self,
        plan: LayoutPlan,
        context: dict[str, Any],
        services: list[ServiceDescriptor],
    ) -> dict[Path, GeneratedFile]:
        """Render the three descriptors, keyed by the directory they go in."""
        compose_ctx = {
            **context,
            "services": [s.model_dump() for s in services],
            "network_name": NETWORK_NAME,
            "named_volumes": sorted(
                {v.split(":", 1)[0] for s in services for v in s.volumes if not v.startswith((".", "/"))}
            ),
        }
        return {
            plan.backend_project: self.renderer.render_file(
                "backend/Dockerfile.j2", "Dockerfile", context, step="containers"
            ),
            plan.frontend_root: self.renderer.render_file(
                "frontend/Dockerfile.j2", "Dockerfile", context, step="containers"
            ),
            plan.project_root: self.renderer.render_file(
                "docker-compose.yml.j2", plan.compose_file.name, compose_ctx, step="containers"
            ),
        }

    async def generate_all(
        self,
        plan: LayoutPlan,
        context: dict[str, Any],
        services: list[ServiceDescriptor],
    ) -> dict[str, Path]:
        """Check consistency, then write every descriptor.

        Returns:
            Mapping of descriptive name to written file path, e.g.
            ``{"compose": Path(".../docker-compose.yml"), ...}``.

        Raises:
            FileWriteError: On an inconsistency or a failed write.
        """
        files = self.build_files(plan, context, services)
        by_name = {s.name: s for s in services}

        self._check_ports(files[plan.backend_project], by_name["backend"], plan.backend_project)
        self._check_ports(files[plan.frontend_root], by_name["frontend"], plan.frontend_root)
        await self._check_profile_variables(by_name["backend"], plan.resources_dir)

        labels = {
            plan.backend_project: "backend",
            plan.frontend_root: "frontend",
            plan.project_root: "compose",
        }
        result: dict[str, Path] = {}
        for directory, generated in files.items():
            result[labels[directory]] = await generated.write(directory, step="containers")
        return result

    # -- Consistency checks ------------------------------------------------

    @staticmethod
    def _check_ports(dockerfile: GeneratedFile, service: ServiceDescriptor, directory: Path) -> None:
        exposed = {int(p) for p in _EXPOSE_PATTERN.findall(dockerfile.content)}
        if exposed != {service.container_port}:
            raise FileWriteError(
                f"Dockerfile exposes {sorted(exposed)} but the '{service.name}' service "
                f"expects port {service.container_port}",
                path=directory / "Dockerfile",
                step="containers",
            )

    @staticmethod
    async def _check_profile_variables(service: ServiceDescriptor, resources_dir: Path) -> None:
        """Every backend variable must be read by its profile or the default profile."""
        referenced: set[str] = set()
        for profile in ("default", service.profile or "default"):
            path = resources_dir / profile_file_name(profile)
            try:
                text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except OSError as exc:
                raise FileWriteError(
                    f"Cannot read configuration profile: {exc.strerror or exc}",
                    path=path,
                    step="containers",
                ) from exc
            referenced.update(_PLACEHOLDER_NAME.findall(text))

        unknown = sorted(set(service.environment) - referenced)
        if unknown:
            raise FileWriteError(
                f"Service '{service.name}' sets variables no profile reads: {', '.join(unknown)}",
                path=resources_dir,
                step="containers",
            )
