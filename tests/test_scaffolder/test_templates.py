"""Tests for template rendering (stackseed.scaffolder.templates).

Covers:
- spring_env / compose_env filters
- StrictUndefined: missing context values raise MissingPlaceholderError
- GeneratedFile validation (leftover placeholders, escaping paths)
- render_to_file writes parents and reports failures as FileWriteError
- rendering failures carry the pipeline step of the caller
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from stackseed.errors import FileWriteError, MissingPlaceholderError
from stackseed.scaffolder.templates import (
    GeneratedFile,
    TemplateRenderer,
    compose_env_ref,
    spring_env_ref,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    (root / "sub").mkdir(parents=True)
    (root / "greeting.txt.j2").write_text("Hello {{ name }}!\n", encoding="utf-8")
    (root / "sub" / "env.j2").write_text(
        "url={{ 'DB_HOST' | spring_env('postgres') }}\nuser={{ 'DB_USER' | spring_env }}\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def renderer(template_dir: Path) -> TemplateRenderer:
    return TemplateRenderer(template_dir)


class TestFilters:
    def test_spring_env_with_default(self):
        assert spring_env_ref("DB_HOST", "postgres") == "${DB_HOST:postgres}"

    def test_spring_env_without_default(self):
        assert spring_env_ref("POSTGRES_PASSWORD") == "${POSTGRES_PASSWORD}"

    def test_spring_env_numeric_default(self):
        assert spring_env_ref("DB_PORT", 5432) == "${DB_PORT:5432}"

    def test_compose_env(self):
        assert compose_env_ref("POSTGRES_DB", "devdb") == "${POSTGRES_DB:-devdb}"
        assert compose_env_ref("POSTGRES_DB") == "${POSTGRES_DB}"

    def test_filters_registered(self, renderer):
        out = renderer.render("sub/env.j2", {})
        assert out == "url=${DB_HOST:postgres}\nuser=${DB_USER}\n"


class TestRender:
    def test_render(self, renderer):
        assert renderer.render("greeting.txt.j2", {"name": "demo"}) == "Hello demo!\n"

    def test_missing_value_raises(self, renderer):
        with pytest.raises(MissingPlaceholderError) as exc_info:
            renderer.render("greeting.txt.j2", {})
        assert exc_info.value.placeholder == "name"
        assert exc_info.value.template == "greeting.txt.j2"

    def test_render_file(self, renderer):
        generated = renderer.render_file("greeting.txt.j2", "out/hello.txt", {"name": "x"})
        assert generated.relative_path == PurePosixPath("out/hello.txt")
        assert generated.template == "greeting.txt.j2"

    def test_missing_value_reports_step(self, renderer):
        with pytest.raises(MissingPlaceholderError) as exc_info:
            renderer.render_file("greeting.txt.j2", "hello.txt", {}, step="containers")
        assert exc_info.value.step == "containers"

    def test_leftover_placeholder_reports_step(self, renderer):
        with pytest.raises(MissingPlaceholderError) as exc_info:
            renderer.render_file("greeting.txt.j2", "hello.txt", {"name": "{{ x }}"}, step="frontend")
        assert exc_info.value.step == "frontend"
        assert exc_info.value.template == "greeting.txt.j2"
        assert exc_info.value.placeholder == "{{ x }}"

    def test_leftover_placeholder_defaults_to_synthesize(self, renderer):
        with pytest.raises(MissingPlaceholderError) as exc_info:
            renderer.render_file("greeting.txt.j2", "hello.txt", {"name": "{{ x }}"})
        assert exc_info.value.step == "synthesize"


class TestGeneratedFile:
    def test_leftover_placeholder_rejected(self):
        with pytest.raises(MissingPlaceholderError):
            GeneratedFile(PurePosixPath("a.txt"), "value={{ missing }}")

    def test_leftover_block_rejected(self):
        with pytest.raises(MissingPlaceholderError):
            GeneratedFile(PurePosixPath("a.txt"), "{% if x %}y{% endif %}")

    def test_spring_placeholders_allowed(self):
        generated = GeneratedFile(PurePosixPath("a.properties"), "x=${DB_HOST:postgres}")
        assert "${DB_HOST" in generated.content

    @pytest.mark.parametrize("path", ["/etc/passwd", "../escape.txt", "a/../../b"])
    def test_escaping_paths_rejected(self, path):
        with pytest.raises(ValueError):
            GeneratedFile(PurePosixPath(path), "content")


class TestRenderToFile:
    async def test_creates_parents(self, renderer, tmp_path):
        out = tmp_path / "deep" / "nested" / "hello.txt"
        path = await renderer.render_to_file("greeting.txt.j2", out, {"name": "demo"})
        assert path == out
        assert out.read_text(encoding="utf-8") == "Hello demo!\n"

    async def test_write_failure(self, renderer, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        with pytest.raises(FileWriteError) as exc_info:
            await renderer.render_to_file(
                "greeting.txt.j2", blocker / "hello.txt", {"name": "demo"}, step="frontend"
            )
        assert exc_info.value.step == "frontend"
        assert exc_info.value.path == blocker / "hello.txt"
