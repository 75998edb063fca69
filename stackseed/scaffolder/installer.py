"""Archive installation and cleanup of provider-injected files.

Extraction is all-or-nothing from the pipeline's point of view: any problem
with the archive raises ``ExtractionError``. Cleanup is the opposite: each
entry of the removal list is handled on its own, a path that is already gone
is not an error, and running the cleanup twice leaves the same tree as
running it once.
"""

from __future__ import annotations

import asyncio
import shutil
import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from stackseed.config import ProjectSpec
from stackseed.errors import ExtractionError, FileWriteError
from stackseed.scaffolder.templates import TemplateRenderer
from stackseed.utils import print_warning


@dataclass(frozen=True)
class RemovalEntry:
    """A path (relative to the backend project) that cleanup removes.

    A failed removal of a ``required`` entry aborts the pipeline; for other
    entries it is only reported. A missing path is never an error.
    """

    path: PurePosixPath
    required: bool = False


def removal_entries(spec: ProjectSpec) -> list[RemovalEntry]:
    """Provider artifacts that do not belong in the generated project."""
    test_dir = PurePosixPath("src/test/java") / spec.package_path
    return [
        RemovalEntry(PurePosixPath(".mvn"), required=True),
        RemovalEntry(PurePosixPath("mvnw"), required=True),
        RemovalEntry(PurePosixPath("mvnw.cmd"), required=True),
        RemovalEntry(PurePosixPath(".gitattributes")),
        RemovalEntry(PurePosixPath("HELP.md")),
        RemovalEntry(test_dir / f"{spec.application_class}Tests.java"),
        RemovalEntry(test_dir / "DemoApplicationTests.java"),
    ]


class ArchiveInstaller:
    """Extracts the backend template and strips what the provider adds."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    # -- Extraction --------------------------------------------------------

    async def install(self, archive: Path, backend_root: Path, spec: ProjectSpec) -> Path:
        """Extract *archive* into *backend_root* and delete the archive.

        Returns:
            The extracted backend project directory (``<backend_root>/<artifact>``).

        Raises:
            ExtractionError: If the archive is unreadable, unsafe, or does not
                contain the expected project folder.
        """
        project = await asyncio.to_thread(_extract, archive, backend_root, spec.artifact_id)
        await asyncio.to_thread(archive.unlink, missing_ok=True)
        return project

    # -- Cleanup -----------------------------------------------------------

    async def clean(self, project: Path, spec: ProjectSpec) -> list[Path]:
        """Remove provider artifacts and rewrite the ignore-rules file.

        Returns:
            The paths that were actually removed by this call.
        """
        removed: list[Path] = []
        for entry in removal_entries(spec):
            target = project.joinpath(*entry.path.parts)
            try:
                if await asyncio.to_thread(_remove, target):
                    removed.append(target)
            except OSError as exc:
                if entry.required:
                    raise FileWriteError(
                        f"Failed to remove provider artifact: {exc.strerror or exc}",
                        path=target,
                        step="install",
                    ) from exc
                print_warning(f"Could not remove {target}: {exc}")

        await self.renderer.render_to_file(
            "backend/gitignore.j2", project / ".gitignore", {}, step="install"
        )
        return removed


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract(archive: Path, backend_root: Path, artifact_id: str) -> Path:
    root = backend_root.resolve()
    try:
        with zipfile.ZipFile(archive) as zf:
            bad = zf.testzip()
            if bad is not None:
                raise ExtractionError(f"Corrupt archive member {bad!r}", path=archive)
            for member in zf.namelist():
                dest = (root / member).resolve()
                if dest != root and root not in dest.parents:
                    raise ExtractionError(f"Archive member escapes target directory: {member!r}", path=archive)
            zf.extractall(root)
    except zipfile.BadZipFile as exc:
        raise ExtractionError(f"Failed to unzip project: {exc}", path=archive) from exc
    except OSError as exc:
        raise ExtractionError(f"Failed to unzip project: {exc.strerror or exc}", path=archive) from exc

    project = backend_root / artifact_id
    if not project.is_dir():
        raise ExtractionError(f"Archive does not contain the '{artifact_id}' project folder", path=archive)
    return project


def _remove(target: Path) -> bool:
    """Remove a file or directory tree; return ``False`` if it did not exist."""
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
        return True
    try:
        target.unlink()
    except FileNotFoundError:
        return False
    return True
