"""Static frontend generation.

Generates ``index.html``, ``style.css`` and ``script.js`` for the frontend
service. The script is rendered with a relative API path and then patched
to the backend's public address: the browser runs outside the compose
network and cannot resolve the backend by service name.
"""

from __future__ import annotations

import asyncio
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any

from stackseed.errors import PatchError
from stackseed.scaffolder.templates import TemplateRenderer

SCRIPT_NAME = "script.js"

_FRONTEND_FILES: tuple[str, ...] = ("index.html", "style.css", SCRIPT_NAME)


class FrontendGenerator:
    """Generates the static site and rewrites its API endpoint."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def generate(self, output_dir: Path, context: dict[str, Any]) -> list[Path]:
        """Render the site files into *output_dir*.

        Returns:
            List of written file paths.
        """
        written: list[Path] = []
        for name in _FRONTEND_FILES:
            path = await self.renderer.render_to_file(
                f"frontend/{name}.j2", output_dir / name, context, step="frontend"
            )
            written.append(path)
        return written

    async def patch_script(self, output_dir: Path, relative_path: str, public_base_url: str) -> Path:
        """Point every ``fetch('<relative_path>')`` at the backend's public URL.

        The new content is written to a temporary file next to the script
        and moved over it, so the script is either fully patched or left as
        it was; no temporary or backup file remains afterwards.

        Raises:
            PatchError: If the script is missing, holds no reference to
                *relative_path* in either form, or cannot be replaced.
        """
        script = output_dir / SCRIPT_NAME
        absolute = public_base_url.rstrip("/") + relative_path
        await asyncio.to_thread(_patch_fetch_url, script, relative_path, absolute)
        return script


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _fetch_pattern(url: str) -> re.Pattern[str]:
    return re.compile(r"fetch\((['\"])" + re.escape(url) + r"\1\)")


def _patch_fetch_url(script: Path, relative: str, absolute: str) -> None:
    try:
        original = script.read_text(encoding="utf-8")
    except OSError as exc:
        raise PatchError(f"Failed to read frontend script: {exc.strerror or exc}", path=script) from exc

    patched, count = _fetch_pattern(relative).subn(f"fetch('{absolute}')", original)
    absolute_refs = len(_fetch_pattern(absolute).findall(patched))
    if count == 0 and absolute_refs == 0:
        raise PatchError(f"No API call to '{relative}' found in frontend script", path=script)
    if absolute_refs != 1:
        raise PatchError(
            f"Expected exactly one API call to '{absolute}', found {absolute_refs}",
            path=script,
        )
    if count == 0:
        return

    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=script.parent,
            prefix=f".{script.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        ) as f:
            temp_path = Path(f.name)
            f.write(patched)
        shutil.copymode(script, temp_path)
        os.replace(temp_path, script)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise PatchError(f"Failed to update frontend script: {exc.strerror or exc}", path=script) from exc
