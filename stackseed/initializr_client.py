"""Async client for a Spring Initializr-compatible template provider.

Wraps the two endpoints the generator needs (``/metadata/client`` and
``/starter.zip``) with explicit timeouts and structured responses. Failures
are reported in the response objects instead of being raised, so callers
decide which of them are fatal.

Typical usage::

    client = InitializrClient()
    versions = await client.list_boot_versions()
    if versions.success:
        print(versions.versions)
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, Field

_BODY_PREVIEW_CHARS = 2000


class BootVersions(BaseModel):
    """Revisions currently offered by the provider."""

    versions: list[str] = Field(default_factory=list, description="Revision ids in provider order")
    success: bool = Field(default=True)
    error: str | None = Field(default=None)


class StarterDownload(BaseModel):
    """Result of a starter archive request."""

    content: bytes = Field(default=b"", description="Response body")
    status_code: int | None = Field(default=None)
    success: bool = Field(default=True)
    reason: str | None = Field(default=None, description="'network' or 'rejected' on failure")
    error: str | None = Field(default=None)

    @property
    def body_preview(self) -> str:
        """Decoded, truncated body for diagnostics."""
        return self.content.decode("utf-8", errors="replace")[:_BODY_PREVIEW_CHARS]


class InitializrClient:
    """Async client for the template provider REST API.

    Every call opens a fresh ``httpx.AsyncClient`` configured with the base
    URL, redirect following and the timeout for that call. A single attempt
    is made per call.
    """

    def __init__(
        self,
        base_url: str = "https://start.spring.io",
        timeout: float = 60.0,
        connect_timeout: float = 10.0,
        metadata_timeout: float = 15.0,
        starter_path: str = "/starter.zip",
        metadata_path: str = "/metadata/client",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.metadata_timeout = metadata_timeout
        self.starter_path = starter_path
        self.metadata_path = metadata_path

    @classmethod
    def from_config(cls, config: Any) -> "InitializrClient":
        """Build a client from an :class:`~stackseed.config.InitializrConfig`."""
        return cls(
            base_url=config.base_url,
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            metadata_timeout=config.metadata_timeout,
            starter_path=config.starter_path,
            metadata_path=config.metadata_path,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self, timeout: float) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` for one request."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout, connect=self.connect_timeout),
            follow_redirects=True,
        )

    @staticmethod
    def _extract_versions(data: Any) -> list[str]:
        """Pull the revision ids out of a metadata document.

        The document lists them under ``bootVersion.values[].id``.
        """
        section = data["bootVersion"]
        return [str(entry["id"]) for entry in section["values"]]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_boot_versions(self) -> BootVersions:
        """Fetch the revisions the provider currently offers."""
        try:
            async with self._client(self.metadata_timeout) as client:
                response = await client.get(
                    self.metadata_path, headers={"Accept": "application/json"}
                )
                response.raise_for_status()
                versions = self._extract_versions(response.json())
                return BootVersions(versions=versions)
        except httpx.ConnectError:
            return BootVersions(
                success=False,
                error=f"Cannot connect to template provider at {self.base_url}",
            )
        except httpx.TimeoutException:
            return BootVersions(
                success=False,
                error=f"Metadata request timed out after {self.metadata_timeout}s",
            )
        except httpx.HTTPStatusError as exc:
            return BootVersions(
                success=False,
                error=f"Metadata request returned HTTP {exc.response.status_code}",
            )
        except httpx.HTTPError as exc:
            return BootVersions(success=False, error=f"Metadata request failed: {exc}")
        except (ValueError, KeyError, TypeError) as exc:
            return BootVersions(success=False, error=f"Unexpected metadata format: {exc!r}")

    async def download_starter(self, params: dict[str, str]) -> StarterDownload:
        """Request a parameterized starter archive.

        Args:
            params: Query parameters (``type``, ``bootVersion``, ``groupId``...).

        Returns:
            A ``StarterDownload`` holding the archive bytes, or the failure
            reason together with whatever body the provider sent back.
        """
        try:
            async with self._client(self.timeout) as client:
                response = await client.get(self.starter_path, params=params)
        except httpx.TimeoutException:
            return StarterDownload(
                success=False,
                reason="network",
                error=f"Download timed out after {self.timeout}s",
            )
        except httpx.HTTPError as exc:
            return StarterDownload(
                success=False,
                reason="network",
                error=f"Cannot reach template provider at {self.base_url}: {exc}",
            )

        if not response.is_success:
            return StarterDownload(
                content=response.content,
                status_code=response.status_code,
                success=False,
                reason="rejected",
                error=f"Template provider returned HTTP {response.status_code}",
            )
        return StarterDownload(content=response.content, status_code=response.status_code)
