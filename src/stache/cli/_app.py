# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
"""The command-line interface for Stache."""

from __future__ import annotations

from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import orjson
from cyclopts import App, Parameter
from rich.console import Console
from rich.markup import escape

from stache.config import LogLevel, StacheConfig, load_config
from stache.exceptions import StacheError
from stache.repository import TemplateRepository, create_repository
from stache.sources import UrlDataSource
from stache.utils import create_logger

from ._shared import ExitCode, exit_code_for, exit_with_error

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

_HELP = "Render Mustache templates with partials loaded from a template repository."


def _load_settings(
    *,
    config: Path | None,
    directory: Path | None,
    extension: str | None,
    encoding: str | None,
    verbose: bool,
) -> StacheConfig:
    """Load configuration with CLI flags as the highest-precedence source."""
    templates: dict[str, str] = {}
    if directory is not None:
        templates["source"] = "directory"
        templates["directory"] = str(directory)
    if extension is not None:
        templates["extension"] = extension
    if encoding is not None:
        templates["encoding"] = encoding

    overrides: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    if templates:
        overrides["templates"] = templates
    if verbose:
        overrides["logging"] = {"level": LogLevel.DEBUG.value}

    return load_config(config_path=config, overrides=overrides)


def _create_logger(
    settings: StacheConfig, command: str, stack: ExitStack
) -> FilteringBoundLogger:
    """Create the command logger. A log file is closed when ``stack`` exits."""
    stream = None
    if settings.logging.file:
        log_path = Path(settings.logging.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        stream = stack.enter_context(log_path.open("a", encoding="utf-8"))
    return create_logger(
        level=settings.logging.level.value,
        log_format=settings.logging.format.value,  # type: ignore[arg-type]
        stream=stream,
        command=command,
    )


def _load_data(data: Path | None, json: str | None) -> dict[str, Any]:  # pyright: ignore[reportExplicitAny]
    """Merge the rendering context from a JSON file and inline JSON."""
    context: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    for label, raw in (
        (str(data), data.read_bytes() if data is not None else None),
        ("--json", json),
    ):
        if raw is None:
            continue
        try:
            value = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            msg = f"Invalid JSON in {label}: {e}"
            raise ValueError(msg) from e
        if not isinstance(value, dict):
            msg = f"JSON in {label} must be an object"
            raise ValueError(msg)  # noqa: TRY004
        context.update(value)  # pyright: ignore[reportUnknownArgumentType]
    return context


def create_app(
    console: Console | None = None,
    error_console: Console | None = None,
    *,
    exit_on_error: bool = True,
) -> App:
    """Create the ``stache`` CLI application.

    Args:
        console: Console for regular output. Defaults to stdout.
        error_console: Console for errors. Defaults to stderr.
        exit_on_error: Whether cyclopts exits on argument errors.

    Returns:
        The configured App.
    """
    out = console if console is not None else Console()
    err = error_console if error_console is not None else Console(stderr=True)

    app = App(
        name="stache",
        help=_HELP,
        help_on_error=True,
        console=out,
        error_console=err,
        exit_on_error=exit_on_error,
    )

    def _repository(
        *,
        config: Path | None,
        directory: Path | None,
        extension: str | None,
        encoding: str | None,
        verbose: bool,
        command: str,
        stack: ExitStack,
    ) -> tuple[TemplateRepository, FilteringBoundLogger]:
        try:
            settings = _load_settings(
                config=config,
                directory=directory,
                extension=extension,
                encoding=encoding,
                verbose=verbose,
            )
            logger = _create_logger(settings, command, stack)
            repository = create_repository(settings.templates, logger=logger)
        except StacheError as e:
            exit_with_error(str(e), exit_code_for(e), console=err)
        except OSError as e:
            exit_with_error(f"Cannot open log file: {e}", ExitCode.LOAD_ERROR, console=err)

        if isinstance(repository.data_source, UrlDataSource):
            _ = stack.callback(repository.data_source.close)
        return repository, logger

    @app.command
    def render(  # pyright: ignore[reportUnusedFunction]
        name: Annotated[
            str | None, Parameter(help="Template name to render")
        ] = None,
        *,
        string: Annotated[
            str | None,
            Parameter(name="--string", help="Render this template string instead"),
        ] = None,
        data: Annotated[
            Path | None,
            Parameter(name="--data", help="JSON file with the rendering context"),
        ] = None,
        json: Annotated[
            str | None,
            Parameter(name="--json", help="Inline JSON object merged over --data"),
        ] = None,
        directory: Annotated[
            Path | None,
            Parameter(name=["--directory", "-d"], help="Template directory"),
        ] = None,
        extension: Annotated[
            str | None, Parameter(name="--extension", help="Template file extension")
        ] = None,
        encoding: Annotated[
            str | None, Parameter(name="--encoding", help="Template file encoding")
        ] = None,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        verbose: Annotated[
            bool, Parameter(name="--verbose", help="Log resolution details")
        ] = False,
    ) -> None:
        """Render a named template or a template string.

        Args:
            name: Template name to render.
            string: Template string to render instead of a named template.
            data: JSON file with the rendering context.
            json: Inline JSON object merged over --data.
            directory: Template directory (overrides configuration).
            extension: Template file extension (overrides configuration).
            encoding: Template file encoding (overrides configuration).
            config: Path to config file.
            verbose: Log resolution details.
        """
        if (name is None) == (string is None):
            exit_with_error(
                "Pass either a template name or --string", ExitCode.LOAD_ERROR, console=err
            )

        try:
            context = _load_data(data, json)
        except (OSError, ValueError) as e:
            exit_with_error(str(e), ExitCode.LOAD_ERROR, console=err)

        with ExitStack() as stack:
            repository, logger = _repository(
                config=config,
                directory=directory,
                extension=extension,
                encoding=encoding,
                verbose=verbose,
                command="render",
                stack=stack,
            )

            try:
                if string is not None:
                    template = repository.template_from_string(string)
                else:
                    template = repository.template_named(name or "")
                output = template.render(context)
            except StacheError as e:
                logger.error("render_failed", error=type(e).__name__, message=str(e))
                exit_with_error(str(e), exit_code_for(e), console=err)

            logger.info("render_completed", name=name)
        out.out(output, end="", highlight=False)

    @app.command
    def check(  # pyright: ignore[reportUnusedFunction]
        *names: Annotated[str, Parameter(help="Template names to compile")],
        directory: Annotated[
            Path | None,
            Parameter(name=["--directory", "-d"], help="Template directory"),
        ] = None,
        extension: Annotated[
            str | None, Parameter(name="--extension", help="Template file extension")
        ] = None,
        encoding: Annotated[
            str | None, Parameter(name="--encoding", help="Template file encoding")
        ] = None,
        config: Annotated[
            Path | None, Parameter(name="--config", help="Path to config file")
        ] = None,
        verbose: Annotated[
            bool, Parameter(name="--verbose", help="Log resolution details")
        ] = False,
    ) -> None:
        """Compile templates and their partials, reporting every failure.

        Args:
            names: Template names to compile.
            directory: Template directory (overrides configuration).
            extension: Template file extension (overrides configuration).
            encoding: Template file encoding (overrides configuration).
            config: Path to config file.
            verbose: Log resolution details.
        """
        if not names:
            exit_with_error("No template names given", ExitCode.LOAD_ERROR, console=err)

        worst = ExitCode.SUCCESS
        with ExitStack() as stack:
            repository, logger = _repository(
                config=config,
                directory=directory,
                extension=extension,
                encoding=encoding,
                verbose=verbose,
                command="check",
                stack=stack,
            )

            for name in names:
                try:
                    template = repository.template_named(name)
                except StacheError as e:
                    code = exit_code_for(e)
                    worst = max(worst, code)
                    logger.warning("check_failed", name=name, error=type(e).__name__)
                    err.print(f"[red]✗[/red] {escape(name)}: {escape(str(e))}")
                else:
                    partials = len(template.partials)
                    out.print(
                        f"[green]✓[/green] {escape(name)} "
                        f"({partials} direct partial{'s' if partials != 1 else ''})"
                    )

        if worst != ExitCode.SUCCESS:
            raise SystemExit(worst)

    return app


app = create_app()


def main() -> None:
    """Default entrypoint for the `stache` CLI."""
    create_app()()


if __name__ == "__main__":
    main()
