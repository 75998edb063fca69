"""Template revision validation against the provider's metadata."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from stackseed.initializr_client import InitializrClient
from stackseed.utils import version_sort_key


class VersionStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    UNKNOWN = "unknown"


class VersionCheck(BaseModel):
    """Outcome of a revision check.

    ``valid_versions`` is filled for ``INVALID`` (newest first) and
    ``reason`` for ``UNKNOWN``.
    """

    revision: str
    status: VersionStatus
    valid_versions: list[str] = Field(default_factory=list)
    reason: str | None = None


class VersionValidator:
    """Confirms that a revision is currently offered by the provider."""

    def __init__(self, client: InitializrClient) -> None:
        self.client = client

    async def validate(self, revision: str) -> VersionCheck:
        result = await self.client.list_boot_versions()
        if not result.success:
            return VersionCheck(revision=revision, status=VersionStatus.UNKNOWN, reason=result.error)
        if not result.versions:
            return VersionCheck(
                revision=revision,
                status=VersionStatus.UNKNOWN,
                reason="Provider metadata lists no revisions",
            )

        if revision in result.versions:
            return VersionCheck(revision=revision, status=VersionStatus.VALID)

        newest_first = sorted(set(result.versions), key=version_sort_key, reverse=True)
        return VersionCheck(
            revision=revision,
            status=VersionStatus.INVALID,
            valid_versions=newest_first,
        )
