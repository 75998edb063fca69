"""stackseed command-line pipeline.

Checks the host environment, resolves the configuration and runs the
project generator, turning any ``GenerationError`` into a diagnostic on
stderr and a non-zero exit status.

Usage::

    stackseed demo
    PROJECT_DIR=demo stackseed --output ./out
    python -m stackseed demo --skip-version-check
"""

from __future__ import annotations

import asyncio
import sys
import time

from pydantic import ValidationError
from rich.panel import Panel

from stackseed.config import Config
from stackseed.errors import EnvironmentMismatchError, GenerationError
from stackseed.scaffolder import GenerationResult, ProjectGenerator
from stackseed.utils import (
    console,
    print_error,
    print_info,
    print_step_header,
    print_success,
    print_summary_table,
    relative_to_root,
)


def check_environment(platform: str | None = None) -> None:
    """Refuse to run anywhere but Linux (the generator's container).

    Raises:
        EnvironmentMismatchError: On any other platform.
    """
    platform = platform if platform is not None else sys.platform
    if not platform.startswith("linux"):
        raise EnvironmentMismatchError(
            f"This generator is designed to run in Linux environments, not '{platform}'. "
            "Run it through its container image, e.g. docker run -e PROJECT_DIR=your_project <image>"
        )


async def run(config: Config, generator: ProjectGenerator | None = None) -> GenerationResult:
    """Run every step for *config* and return the generation result."""
    print_step_header("environment")
    if config.require_linux:
        check_environment()
        print_info(f"Running on {sys.platform}")
    else:
        print_info("Platform check disabled")

    generator = generator or ProjectGenerator(config)
    return await generator.generate()


def _print_result(result: GenerationResult, elapsed: float) -> None:
    rows = {
        relative_to_root(path, result.project_root): "written"
        for path in result.files
    }
    rows.update({relative_to_root(path, result.project_root): "removed" for path in result.removed})
    print_summary_table(rows, title=f"{result.project_root}")
    print_success(f"Success: project setup complete in {result.project_root} ({elapsed:.1f}s)")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``stackseed`` and ``python -m stackseed``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="stackseed",
        description="Generate a Spring Boot backend, static frontend and Docker Compose project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "The project name is taken from the PROJECT_DIR environment variable,\n"
            "then from NAME, and defaults to 'my_project'.\n\n"
            "Examples:\n"
            "  stackseed demo\n"
            "  stackseed demo --output ./out --skip-version-check\n"
        ),
    )
    parser.add_argument("name", nargs="?", default=None, help="Project name")
    parser.add_argument("--output", "-o", default=None, help="Output base directory (default: /output)")
    parser.add_argument("--boot-version", default=None, help="Template revision (e.g. 3.4.4.RELEASE)")
    parser.add_argument("--java-version", default=None, help="Java version of the backend")
    parser.add_argument("--group-id", default=None, help="Backend group id (dotted namespace)")
    parser.add_argument("--artifact-id", default=None, help="Backend artifact id")
    parser.add_argument(
        "--skip-version-check",
        action="store_true",
        help="Do not validate the template revision against the provider's metadata",
    )

    args = parser.parse_args(argv)

    try:
        config = Config.from_env(
            args.name,
            output_base=args.output,
            boot_version=args.boot_version,
            java_version=args.java_version,
            group_id=args.group_id,
            artifact_id=args.artifact_id,
            validate_version=False if args.skip_version_check else None,
        )
    except ValidationError as exc:
        print_error(f"Error: invalid configuration\n{exc}")
        sys.exit(1)

    console.print(
        Panel(
            f"[bold]Generating '{config.spec.name}' in {config.spec.output_base}[/bold]",
            style="cyan",
        )
    )

    started = time.monotonic()
    try:
        result = asyncio.run(run(config))
    except GenerationError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    _print_result(result, time.monotonic() - started)


if __name__ == "__main__":
    main()
