from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from stache.cli import create_app


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty working directory."""
    directory = tmp_path / "work"
    directory.mkdir()
    monkeypatch.chdir(directory)
    return directory


@pytest.fixture
def wide_console() -> Console:
    return Console(
        width=400,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )


@pytest.fixture
def stache_cli_with_exit_code(
    wide_console: Console, workdir: Path
) -> Callable[..., int]:
    """Create CLI app for testing that returns the exit code.

    Output goes to the captured stdout. Use capsys to inspect it.
    """

    app = create_app(console=wide_console, error_console=wide_console)

    def _run(*args: str) -> int:
        """Run CLI app and return exit code (0 if no SystemExit)."""

        try:
            app(args)
        except SystemExit as e:
            return e.code if isinstance(e.code, int) else 1
        else:
            return 0

    return _run
