"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``stackseed/scaffolder/templates/`` directory and renders them with the
project context, and the ``GeneratedFile`` value that a rendering produces.
Undefined template variables are errors: a template that names a parameter
missing from the context raises ``MissingPlaceholderError`` instead of
silently rendering an empty string.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, UndefinedError, select_autoescape

from stackseed.errors import FileWriteError, MissingPlaceholderError


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# Jinja2-style placeholders that survived rendering
_UNRESOLVED_PATTERN = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)
_UNDEFINED_NAME = re.compile(r"'([^']+)' is undefined")


# ---------------------------------------------------------------------------
# GeneratedFile
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GeneratedFile:
    """A rendered file: a path relative to some root plus its content."""

    relative_path: PurePosixPath
    content: str
    template: str = ""

    def __post_init__(self) -> None:
        leftover = _UNRESOLVED_PATTERN.search(self.content)
        if leftover:
            raise MissingPlaceholderError(self.template or str(self.relative_path), leftover.group(0))
        if self.relative_path.is_absolute() or ".." in self.relative_path.parts:
            raise ValueError(f"Generated file path must stay under its root: {self.relative_path}")

    def target(self, root: Path) -> Path:
        return root.joinpath(*self.relative_path.parts)

    async def write(self, root: Path, step: str = "synthesize") -> Path:
        """Write the file under *root*, creating parent directories.

        Raises:
            FileWriteError: If a directory or the file cannot be written.
        """
        out = self.target(root)
        try:
            await asyncio.to_thread(_write_file, out, self.content)
        except OSError as exc:
            raise FileWriteError(f"Failed to write file: {exc.strerror or exc}", path=out, step=step) from exc
        return out


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Templates are ``.j2`` files under a configurable template directory and
    are rendered with a context dictionary holding the project parameters
    (name, namespace, ports, database contract, ...).
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["spring_env"] = spring_env_ref
        self.env.filters["compose_env"] = compose_env_ref

    # -- Rendering ---------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any], step: str | None = None) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"backend/application.properties.j2"``).
            context: Dictionary of variables available inside the template.
            step: Pipeline step reported if rendering fails.

        Returns:
            The rendered template content as a string.

        Raises:
            MissingPlaceholderError: If the template uses a variable the
                context does not define.
        """
        template = self.env.get_template(template_path)
        try:
            return template.render(**context)
        except UndefinedError as exc:
            match = _UNDEFINED_NAME.search(str(exc))
            placeholder = match.group(1) if match else str(exc)
            raise MissingPlaceholderError(template_path, placeholder, step=step) from exc

    def render_file(
        self,
        template_path: str,
        relative_path: str | PurePosixPath,
        context: dict[str, Any],
        step: str | None = None,
    ) -> GeneratedFile:
        """Render *template_path* into a ``GeneratedFile`` at *relative_path*.

        Placeholders left in the output (for example from a context value
        that itself looks like template syntax) are reported against *step*.
        """
        content = self.render(template_path, context, step=step)
        try:
            return GeneratedFile(PurePosixPath(relative_path), content, template=template_path)
        except MissingPlaceholderError as exc:
            raise MissingPlaceholderError(exc.template, exc.placeholder, step=step) from exc

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
        step: str = "synthesize",
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output
        path.
        """
        out = Path(output_path)
        generated = self.render_file(template_path, out.name, context, step=step)
        return await generated.write(out.parent, step=step)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def spring_env_ref(name: str, default: Any = None) -> str:
    """Spring property placeholder: ``${NAME}`` or ``${NAME:default}``."""
    if default is None:
        return "${" + name + "}"
    return "${" + f"{name}:{default}" + "}"


def compose_env_ref(name: str, default: Any = None) -> str:
    """Compose interpolation: ``${NAME}`` or ``${NAME:-default}``."""
    if default is None:
        return "${" + name + "}"
    return "${" + f"{name}:-{default}" + "}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
