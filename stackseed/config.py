"""stackseed configuration.

Centralised, typed configuration for the generator. Every setting is a
Pydantic v2 model so the project parameters are validated once, when the
configuration is built, and are read-only for the rest of the run.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stackseed.utils import to_pascal

DEFAULT_PROJECT_NAME = "my_project"
DEFAULT_OUTPUT_BASE = Path("/output")

DEFAULT_DEPENDENCIES: tuple[str, ...] = (
    "web",
    "data-jpa",
    "postgresql",
    "h2",
    "security",
    "validation",
    "devtools",
)

# Ends up unquoted in directory names, compose keys and container names
_PROJECT_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_JAVA_NAMESPACE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_RELEASE_SUFFIX = ".RELEASE"

API_TEST_PATH = "/api/test"


class ProjectSpec(BaseModel):
    """Immutable description of the project to generate."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default=DEFAULT_PROJECT_NAME, description="Project directory name")
    output_base: Path = Field(default=DEFAULT_OUTPUT_BASE)
    boot_version: str = Field(default="3.4.4.RELEASE", description="Template revision id")
    java_version: str = Field(default="17")
    dependencies: tuple[str, ...] = Field(default=DEFAULT_DEPENDENCIES)
    group_id: str = Field(default="fr.eql.ai116.duflot")
    artifact_id: str = Field(default="backend")
    packaging: str = Field(default="jar")
    project_type: str = Field(default="maven-project")
    language: str = Field(default="java")

    @field_validator("name")
    @classmethod
    def _safe_name(cls, value: str) -> str:
        value = value.strip()
        if not _PROJECT_NAME.match(value):
            raise ValueError(
                "project name must start with a letter or digit and contain only "
                f"letters, digits, '.', '_' or '-', got {value!r}"
            )
        return value

    @field_validator("group_id", "artifact_id")
    @classmethod
    def _java_namespace(cls, value: str) -> str:
        if not _JAVA_NAMESPACE.match(value):
            raise ValueError(f"{value!r} is not a valid Java namespace identifier")
        return value

    @field_validator("packaging")
    @classmethod
    def _known_packaging(cls, value: str) -> str:
        if value not in ("jar", "war"):
            raise ValueError(f"unsupported packaging {value!r} (expected 'jar' or 'war')")
        return value

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def request_boot_version(self) -> str:
        """Revision id as the starter endpoint expects it (no ``.RELEASE``)."""
        if self.boot_version.endswith(_RELEASE_SUFFIX):
            return self.boot_version[: -len(_RELEASE_SUFFIX)]
        return self.boot_version

    @property
    def base_package(self) -> str:
        return f"{self.group_id}.{self.artifact_id}"

    @property
    def package_path(self) -> str:
        """``base_package`` with every namespace separator turned into ``/``."""
        return self.base_package.replace(".", "/")

    @property
    def application_class(self) -> str:
        return to_pascal(self.artifact_id) + "Application"


class PortConfig(BaseModel):
    """Ports published by the generated services."""

    backend: int = Field(default=8080, ge=1, le=65535)
    frontend: int = Field(default=80, ge=1, le=65535)
    database: int = Field(default=5432, ge=1, le=65535)


class DatabaseConfig(BaseModel):
    """Database service settings and the environment variable contract.

    The ``env_*`` names are shared by the configuration profiles and the
    compose file, so both sides always agree.
    """

    image: str = Field(default="postgres:15-alpine")
    service_name: str = Field(default="db")
    volume_name: str = Field(default="postgres_data")
    env_host: str = Field(default="DB_HOST")
    env_port: str = Field(default="DB_PORT")
    env_name: str = Field(default="POSTGRES_DB")
    env_user: str = Field(default="POSTGRES_USER")
    env_password: str = Field(default="POSTGRES_PASSWORD")
    dev_host: str = Field(default="postgres")
    dev_name: str = Field(default="devdb")
    dev_user: str = Field(default="devuser")
    dev_password: str = Field(default="devpass")


class InitializrConfig(BaseModel):
    """Remote template provider settings."""

    base_url: str = Field(default="https://start.spring.io")
    starter_path: str = Field(default="/starter.zip")
    metadata_path: str = Field(default="/metadata/client")
    timeout: float = Field(default=60.0, gt=0, description="Download read timeout in seconds")
    connect_timeout: float = Field(default=10.0, gt=0)
    metadata_timeout: float = Field(default=15.0, gt=0)


class Config(BaseModel):
    """Global generator configuration.

    Created once by the CLI entry point (usually through :meth:`from_env`)
    and passed to :class:`~stackseed.scaffolder.generator.ProjectGenerator`.
    """

    spec: ProjectSpec = Field(default_factory=ProjectSpec)
    ports: PortConfig = Field(default_factory=PortConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    initializr: InitializrConfig = Field(default_factory=InitializrConfig)
    validate_version: bool = Field(default=True)
    require_linux: bool = Field(default=True)
    backend_max_heap: str = Field(default="512m", pattern=r"^\d+[kmgKMG]$")
    public_host: str = Field(default="localhost")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def backend_public_url(self) -> str:
        """Backend address as seen from a browser outside the compose network."""
        return _http_url(self.public_host, self.ports.backend)

    @property
    def frontend_origin(self) -> str:
        return _http_url(self.public_host, self.ports.frontend)

    def template_context(self) -> dict[str, Any]:
        """Build the Jinja2 template context shared by every generated file."""
        spec = self.spec
        return {
            "project_name": spec.name,
            "group_id": spec.group_id,
            "artifact_id": spec.artifact_id,
            "base_package": spec.base_package,
            "java_version": spec.java_version,
            "packaging": spec.packaging,
            "ports": self.ports.model_dump(),
            "db": self.database.model_dump(),
            "backend_max_heap": self.backend_max_heap,
            "backend_public_url": self.backend_public_url,
            "frontend_origin": self.frontend_origin,
            "backend_dir": f"{spec.name}_back",
            "frontend_dir": f"{spec.name}_front",
            "api_test_path": API_TEST_PATH,
        }

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_project_name(argument: str | None = None) -> str:
        """Project name: ``PROJECT_DIR`` env, then *argument*, then the default."""
        from_env = os.environ.get("PROJECT_DIR", "").strip()
        if from_env:
            return from_env
        if argument and argument.strip():
            return argument.strip()
        return DEFAULT_PROJECT_NAME

    @classmethod
    def from_env(cls, name: str | None = None, **overrides: Any) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            PROJECT_DIR, STACKSEED_OUTPUT_BASE, STACKSEED_BOOT_VERSION,
            STACKSEED_JAVA_VERSION, STACKSEED_GROUP_ID, STACKSEED_ARTIFACT_ID,
            STACKSEED_INITIALIZR_URL, STACKSEED_HTTP_TIMEOUT,
            STACKSEED_SKIP_VERSION_CHECK.

        Keyword *overrides* that are not ``None`` win over the environment;
        they use the ``ProjectSpec`` field names plus ``validate_version``.
        """
        spec_kwargs: dict[str, Any] = {"name": cls.resolve_project_name(name)}
        env_map = {
            "output_base": "STACKSEED_OUTPUT_BASE",
            "boot_version": "STACKSEED_BOOT_VERSION",
            "java_version": "STACKSEED_JAVA_VERSION",
            "group_id": "STACKSEED_GROUP_ID",
            "artifact_id": "STACKSEED_ARTIFACT_ID",
        }
        for field_name, env_name in env_map.items():
            if os.environ.get(env_name):
                spec_kwargs[field_name] = os.environ[env_name]

        initializr_kwargs: dict[str, Any] = {}
        if os.environ.get("STACKSEED_INITIALIZR_URL"):
            initializr_kwargs["base_url"] = os.environ["STACKSEED_INITIALIZR_URL"].rstrip("/")
        if os.environ.get("STACKSEED_HTTP_TIMEOUT"):
            initializr_kwargs["timeout"] = os.environ["STACKSEED_HTTP_TIMEOUT"]

        validate_version = os.environ.get("STACKSEED_SKIP_VERSION_CHECK", "").lower() not in (
            "1",
            "true",
            "yes",
        )
        if overrides.get("validate_version") is not None:
            validate_version = bool(overrides.pop("validate_version"))
        overrides.pop("validate_version", None)

        spec_kwargs.update({k: v for k, v in overrides.items() if v is not None})

        return cls(
            spec=ProjectSpec(**spec_kwargs),
            initializr=InitializrConfig(**initializr_kwargs),
            validate_version=validate_version,
        )


def _http_url(host: str, port: int) -> str:
    if port == 80:
        return f"http://{host}"
    return f"http://{host}:{port}"
