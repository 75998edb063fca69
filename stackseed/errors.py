"""Error taxonomy for the generation pipeline.

Every fatal condition is a :class:`GenerationError` tagged with the pipeline
step that raised it, so the CLI can report which step failed and on which
path. A metadata lookup that cannot be completed is not an error; see
:class:`stackseed.scaffolder.versions.VersionCheck`.
"""

from __future__ import annotations

from pathlib import Path


class GenerationError(Exception):
    """Raised when a pipeline step fails irrecoverably."""

    step = "generate"

    def __init__(self, message: str, path: str | Path | None = None, step: str | None = None) -> None:
        if step is not None:
            self.step = step
        self.message = message
        self.path = Path(path) if path is not None else None
        super().__init__(self._format())

    def _format(self) -> str:
        text = f"[{self.step}] {self.message}"
        if self.path is not None:
            text += f" ({self.path})"
        return text


class EnvironmentMismatchError(GenerationError):
    """The generator is running on an unsupported host platform."""

    step = "environment"


class VersionInvalidError(GenerationError):
    """The requested template revision is not offered by the provider."""

    step = "validate"

    def __init__(self, revision: str, valid_versions: list[str]) -> None:
        self.revision = revision
        self.valid_versions = list(valid_versions)
        listing = "\n".join(f"  {v}" for v in self.valid_versions)
        super().__init__(f"Invalid template revision '{revision}'. Valid revisions are:\n{listing}")


class TargetAlreadyExistsError(GenerationError):
    """The project root exists already; nothing was written."""

    step = "layout"

    def __init__(self, path: str | Path) -> None:
        super().__init__("Target directory already exists, aborting", path=path)


class DirectoryCreationError(GenerationError):
    step = "layout"


class DownloadError(GenerationError):
    """The template archive could not be downloaded.

    ``reason`` is ``"network"`` for transport failures and ``"rejected"``
    when the provider answered with a non-success status.
    """

    step = "fetch"

    def __init__(
        self,
        message: str,
        reason: str,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.reason = reason
        self.status_code = status_code
        self.body = body
        if body:
            message = f"{message}\n{body}"
        super().__init__(message)


class ExtractionError(GenerationError):
    step = "install"


class FileWriteError(GenerationError):
    step = "synthesize"


class MissingPlaceholderError(FileWriteError):
    """A template references a parameter that the context does not provide."""

    def __init__(self, template: str, placeholder: str, step: str | None = None) -> None:
        self.template = template
        self.placeholder = placeholder
        super().__init__(f"Unresolved placeholder '{placeholder}' in template {template}", step=step)


class PatchError(GenerationError):
    step = "patch"
