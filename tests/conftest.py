"""Shared pytest fixtures for the stackseed test suite.

Provides reusable fixtures for:
- Project specs and configurations rooted in a temporary directory
- In-memory starter archives shaped like the provider's output
- A fake template provider client
"""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from stackseed.config import Config, ProjectSpec
from stackseed.initializr_client import BootVersions, InitializrClient, StarterDownload


# ---------------------------------------------------------------------------
# Specs & configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def output_base(tmp_path: Path) -> Path:
    """Base directory under which projects are generated."""
    return tmp_path / "out"


@pytest.fixture
def demo_spec(output_base: Path) -> ProjectSpec:
    """The ``demo`` project with every other parameter at its default."""
    return ProjectSpec(name="demo", output_base=output_base)


@pytest.fixture
def demo_config(demo_spec: ProjectSpec) -> Config:
    return Config(spec=demo_spec)


@pytest.fixture
def demo_context(demo_config: Config) -> dict:
    return demo_config.template_context()


# ---------------------------------------------------------------------------
# Starter archives
# ---------------------------------------------------------------------------

def starter_entries(spec: ProjectSpec) -> dict[str, str]:
    """Files of a provider archive for *spec*, keyed by archive path."""
    base = spec.artifact_id
    main_pkg = f"{base}/src/main/java/{spec.package_path}"
    test_pkg = f"{base}/src/test/java/{spec.package_path}"
    return {
        f"{base}/pom.xml": "<project><artifactId>%s</artifactId></project>\n" % spec.artifact_id,
        f"{base}/mvnw": "#!/bin/sh\n",
        f"{base}/mvnw.cmd": "@echo off\n",
        f"{base}/.mvn/wrapper/maven-wrapper.properties": "distributionUrl=x\n",
        f"{base}/HELP.md": "# Getting Started\n",
        f"{base}/.gitattributes": "/mvnw text eol=lf\n",
        f"{base}/.gitignore": "HELP.md\ntarget/\n!.mvn/wrapper/maven-wrapper.jar\n",
        f"{main_pkg}/{spec.application_class}.java": f"package {spec.base_package};\n",
        f"{base}/src/main/resources/application.properties": f"spring.application.name={base}\n",
        f"{test_pkg}/{spec.application_class}Tests.java": f"package {spec.base_package};\n",
    }


def build_zip(entries: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def zip_bytes() -> Callable[[dict[str, str]], bytes]:
    """Build an in-memory zip archive from ``{name: content}``."""
    return build_zip


@pytest.fixture
def starter_zip(demo_spec: ProjectSpec) -> bytes:
    """A valid starter archive for the demo spec."""
    return build_zip(starter_entries(demo_spec))


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[[bytes], Path]:
    """Write archive bytes to a file and return its path."""

    def _make(content: bytes, name: str = "starter.zip") -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _make


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_client(starter_zip: bytes) -> MagicMock:
    """An ``InitializrClient`` stand-in that offers 3.4.4.RELEASE and serves the demo archive."""
    client = MagicMock(spec=InitializrClient)
    client.base_url = "https://start.example.test"
    client.list_boot_versions = AsyncMock(
        return_value=BootVersions(
            versions=["3.5.0-SNAPSHOT", "3.4.4.RELEASE", "3.3.10.RELEASE"],
        )
    )
    client.download_starter = AsyncMock(
        return_value=StarterDownload(content=starter_zip, status_code=200)
    )
    return client
