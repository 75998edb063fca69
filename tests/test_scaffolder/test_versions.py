"""Tests for template revision validation."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from stackseed.initializr_client import BootVersions
from stackseed.scaffolder.versions import VersionStatus, VersionValidator

pytestmark = pytest.mark.unit


class TestVersionValidator:
    async def test_offered_revision_is_valid(self, fake_client):
        check = await VersionValidator(fake_client).validate("3.4.4.RELEASE")
        assert check.status is VersionStatus.VALID
        assert check.valid_versions == []

    async def test_unknown_revision_lists_valid_newest_first(self, fake_client):
        fake_client.list_boot_versions = AsyncMock(
            return_value=BootVersions(versions=["3.3.10.RELEASE", "3.10.0.RELEASE", "3.4.4.RELEASE"])
        )
        check = await VersionValidator(fake_client).validate("2.0.0.RELEASE")
        assert check.status is VersionStatus.INVALID
        assert check.valid_versions == ["3.10.0.RELEASE", "3.4.4.RELEASE", "3.3.10.RELEASE"]

    async def test_exact_match_required(self, fake_client):
        check = await VersionValidator(fake_client).validate("3.4.4")
        assert check.status is VersionStatus.INVALID

    async def test_metadata_failure_is_unknown(self, fake_client):
        fake_client.list_boot_versions = AsyncMock(
            return_value=BootVersions(success=False, error="Cannot connect")
        )
        check = await VersionValidator(fake_client).validate("3.4.4.RELEASE")
        assert check.status is VersionStatus.UNKNOWN
        assert check.reason == "Cannot connect"

    async def test_empty_listing_is_unknown(self, fake_client):
        fake_client.list_boot_versions = AsyncMock(return_value=BootVersions(versions=[]))
        check = await VersionValidator(fake_client).validate("3.4.4.RELEASE")
        assert check.status is VersionStatus.UNKNOWN
