"""Project layout planning and creation.

``plan_layout`` derives every path the pipeline writes to from the
``ProjectSpec`` alone; ``create_layout`` then creates the project root and
the two service directories, refusing to touch a root that already exists.

If the root is created but a service directory cannot be, the error is
raised immediately and the (empty) root is left behind.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, ConfigDict, model_validator

from stackseed.config import ProjectSpec
from stackseed.errors import DirectoryCreationError, TargetAlreadyExistsError

ARCHIVE_NAME = "backend-temp.zip"
COMPOSE_FILE_NAME = "docker-compose.yml"


class LayoutPlan(BaseModel):
    """Paths of the generated project. All of them live under ``project_root``."""

    model_config = ConfigDict(frozen=True)

    project_root: Path
    backend_root: Path
    frontend_root: Path
    backend_project: Path
    main_java_dir: Path
    test_java_dir: Path
    resources_dir: Path
    compose_file: Path
    archive_path: Path

    @model_validator(mode="after")
    def _under_root(self) -> "LayoutPlan":
        for name, value in self:
            if name == "project_root":
                continue
            if value != self.project_root and self.project_root not in value.parents:
                raise ValueError(f"{name} ({value}) is outside the project root {self.project_root}")
        return self


def plan_layout(spec: ProjectSpec) -> LayoutPlan:
    """Compute the project tree for *spec* without touching the filesystem."""
    root = Path(spec.output_base) / spec.name
    backend_root = root / f"{spec.name}_back"
    backend_project = backend_root / spec.artifact_id
    package_parts = spec.package_path.split("/")
    return LayoutPlan(
        project_root=root,
        backend_root=backend_root,
        frontend_root=root / f"{spec.name}_front",
        backend_project=backend_project,
        main_java_dir=backend_project.joinpath("src", "main", "java", *package_parts),
        test_java_dir=backend_project.joinpath("src", "test", "java", *package_parts),
        resources_dir=backend_project / "src" / "main" / "resources",
        compose_file=root / COMPOSE_FILE_NAME,
        archive_path=root / ARCHIVE_NAME,
    )


async def create_layout(plan: LayoutPlan) -> None:
    """Create the project root and the backend/frontend directories.

    Raises:
        TargetAlreadyExistsError: If the project root exists; nothing is
            created in that case.
        DirectoryCreationError: If any directory cannot be created.
    """
    await asyncio.to_thread(_create_layout, plan)


def _create_layout(plan: LayoutPlan) -> None:
    root = plan.project_root
    if root.exists() or root.is_symlink():
        raise TargetAlreadyExistsError(root)

    try:
        root.mkdir(parents=True)
    except OSError as exc:
        raise DirectoryCreationError(
            f"Failed to create project directory: {exc.strerror or exc}", path=root
        ) from exc

    for directory in (plan.frontend_root, plan.backend_root):
        try:
            directory.mkdir()
        except OSError as exc:
            raise DirectoryCreationError(
                f"Failed to create subdirectory: {exc.strerror or exc}", path=directory
            ) from exc
