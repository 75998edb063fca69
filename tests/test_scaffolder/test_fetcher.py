"""Tests for the backend template download."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from stackseed.config import ProjectSpec
from stackseed.errors import DownloadError, FileWriteError
from stackseed.initializr_client import StarterDownload
from stackseed.scaffolder.fetcher import TemplateFetcher, build_starter_params

pytestmark = pytest.mark.unit


class TestBuildStarterParams:
    def test_defaults(self):
        params = build_starter_params(ProjectSpec())
        assert params == {
            "type": "maven-project",
            "language": "java",
            "bootVersion": "3.4.4",
            "baseDir": "backend",
            "groupId": "fr.eql.ai116.duflot",
            "artifactId": "backend",
            "name": "backend",
            "packageName": "fr.eql.ai116.duflot.backend",
            "packaging": "jar",
            "javaVersion": "17",
            "dependencies": "web,data-jpa,postgresql,h2,security,validation,devtools",
        }

    def test_custom_artifact(self):
        params = build_starter_params(ProjectSpec(group_id="com.example", artifact_id="api"))
        assert params["baseDir"] == "api"
        assert params["packageName"] == "com.example.api"


class TestTemplateFetcher:
    async def test_writes_archive(self, fake_client, demo_spec, tmp_path, starter_zip):
        destination = tmp_path / "backend-temp.zip"
        path = await TemplateFetcher(fake_client).fetch(demo_spec, destination)
        assert path == destination
        assert destination.read_bytes() == starter_zip
        fake_client.download_starter.assert_awaited_once_with(build_starter_params(demo_spec))

    async def test_rejected_request(self, fake_client, demo_spec, tmp_path):
        fake_client.download_starter = AsyncMock(
            return_value=StarterDownload(
                content=b'{"message":"Invalid Spring Boot version"}',
                status_code=400,
                success=False,
                reason="rejected",
                error="Template provider returned HTTP 400",
            )
        )
        destination = tmp_path / "backend-temp.zip"
        with pytest.raises(DownloadError) as exc_info:
            await TemplateFetcher(fake_client).fetch(demo_spec, destination)

        err = exc_info.value
        assert err.reason == "rejected"
        assert err.status_code == 400
        assert "Invalid Spring Boot version" in str(err)
        assert not destination.exists()

    async def test_network_failure(self, fake_client, demo_spec, tmp_path):
        fake_client.download_starter = AsyncMock(
            return_value=StarterDownload(success=False, reason="network", error="timed out")
        )
        destination = tmp_path / "backend-temp.zip"
        with pytest.raises(DownloadError) as exc_info:
            await TemplateFetcher(fake_client).fetch(demo_spec, destination)
        assert exc_info.value.reason == "network"
        assert exc_info.value.step == "fetch"
        assert not destination.exists()

    async def test_unwritable_destination(self, fake_client, demo_spec, tmp_path):
        destination = tmp_path / "missing-dir" / "backend-temp.zip"
        with pytest.raises(FileWriteError) as exc_info:
            await TemplateFetcher(fake_client).fetch(demo_spec, destination)
        assert exc_info.value.step == "fetch"
