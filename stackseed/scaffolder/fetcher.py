"""Backend template download."""

from __future__ import annotations

import asyncio
from pathlib import Path

from stackseed.config import ProjectSpec
from stackseed.errors import DownloadError, FileWriteError
from stackseed.initializr_client import InitializrClient


def build_starter_params(spec: ProjectSpec) -> dict[str, str]:
    """Query parameters for the starter archive request.

    ``baseDir`` makes the archive's single top-level folder the artifact id.
    """
    return {
        "type": spec.project_type,
        "language": spec.language,
        "bootVersion": spec.request_boot_version,
        "baseDir": spec.artifact_id,
        "groupId": spec.group_id,
        "artifactId": spec.artifact_id,
        "name": spec.artifact_id,
        "packageName": spec.base_package,
        "packaging": spec.packaging,
        "javaVersion": spec.java_version,
        "dependencies": ",".join(spec.dependencies),
    }


class TemplateFetcher:
    """Downloads the parameterized starter archive to a local file.

    A single attempt is made; a transport failure or a non-success status
    raises ``DownloadError``. Nothing is left on disk when the download
    fails.
    """

    def __init__(self, client: InitializrClient) -> None:
        self.client = client

    async def fetch(self, spec: ProjectSpec, destination: Path) -> Path:
        result = await self.client.download_starter(build_starter_params(spec))
        if not result.success:
            raise DownloadError(
                f"Failed to download project template: {result.error}",
                reason=result.reason or "network",
                status_code=result.status_code,
                body=result.body_preview,
            )

        try:
            await asyncio.to_thread(destination.write_bytes, result.content)
        except OSError as exc:
            await asyncio.to_thread(destination.unlink, missing_ok=True)
            raise FileWriteError(
                f"Failed to save template archive: {exc.strerror or exc}",
                path=destination,
                step="fetch",
            ) from exc
        return destination
