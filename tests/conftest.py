"""Shared test fixtures for Stache tests."""

import os
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest
from rich.console import Console


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep STACHE_ variables from the outer environment out of every test."""
    for key in list(os.environ):
        if key.startswith("STACHE_"):
            monkeypatch.delenv(key)


# ---------------------------------------------------------------------------
# Helper functions for creating test artifacts
# ---------------------------------------------------------------------------


def write_templates(
    base_dir: Path,
    templates: Mapping[str, str],
    *,
    extension: str = "mustache",
) -> Path:
    """Write templates below a directory.

    Args:
        base_dir: Template root directory, created if missing.
        templates: Maps names (which may contain ``/``) to template text.
        extension: File extension, without the dot.

    Returns:
        The template root directory.
    """
    base_dir.mkdir(parents=True, exist_ok=True)
    for name, text in templates.items():
        path = base_dir / f"{name}.{extension}"
        path.parent.mkdir(parents=True, exist_ok=True)
        _ = path.write_text(text, encoding="utf-8")
    return base_dir


@pytest.fixture
def template_dir(tmp_path: Path) -> Callable[..., Path]:
    """Return a function writing templates into ``tmp_path / "templates"``."""

    def _write(templates: Mapping[str, str], *, extension: str = "mustache") -> Path:
        return write_templates(tmp_path / "templates", templates, extension=extension)

    return _write


@pytest.fixture
def console() -> Console:
    return Console(
        width=70,
        force_terminal=True,
        highlight=False,
        color_system=None,
        legacy_windows=False,
    )
