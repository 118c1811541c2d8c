"""Shared pytest fixtures for the create-react-prototype test suite.

Provides reusable fixtures for:
- A temporary project folder with matching ``ProjectPaths``
- A logger that records its output
- ``package.json`` writers
- Mocked package manager, license fetcher, build runner and toolchain
"""

from __future__ import annotations

import io
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from create_react_prototype.build import BuildRunner
from create_react_prototype.config import ProjectPaths
from create_react_prototype.logger import Logger
from create_react_prototype.package_manager import PackageManager, link_string
from create_react_prototype.scaffolder.license import LicenseFetcher, LicenseLookupError
from create_react_prototype.toolchain import Toolchain


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Empty project folder (auto-cleanup)."""
    project = tmp_path / "my-lib"
    project.mkdir()
    return project


@pytest.fixture
def tool_dir(tmp_path: Path) -> Path:
    """Stand-in for the folder this tool is installed in."""
    tool = tmp_path / "tools" / "create-react-prototype"
    tool.mkdir(parents=True)
    (tool / "package.json").write_text(
        json.dumps({"name": "create-react-prototype", "version": "0.9.0"}), encoding="utf-8"
    )
    return tool


@pytest.fixture
def paths(project_dir: Path, tool_dir: Path) -> ProjectPaths:
    """ProjectPaths for the temporary project, using the bundled templates."""
    return ProjectPaths(project_folder=project_dir, tool_folder=tool_dir)


# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------

@pytest.fixture
def logger() -> Logger:
    """Debug-enabled logger writing to an in-memory console."""
    console = Console(file=io.StringIO(), width=200, color_system=None)
    return Logger(debug=True, console=console)


@pytest.fixture
def log_output(logger: Logger) -> Callable[[], str]:
    """Return everything the ``logger`` fixture has printed so far."""
    return lambda: logger.console.file.getvalue()


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------

SAMPLE_PACKAGE_JSON: dict[str, Any] = {
    "name": "my-lib",
    "version": "1.0.0",
    "description": "A \"tiny\" component library",
    "author": "Jane Doe",
    "license": "MIT",
    "keywords": ["react"],
}


@pytest.fixture
def sample_package_json() -> dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_PACKAGE_JSON))


@pytest.fixture
def write_package_json(project_dir: Path) -> Callable[[dict[str, Any]], Path]:
    """Factory that writes a dict as the project's ``package.json``."""

    def _write(data: dict[str, Any]) -> Path:
        path = project_dir / "package.json"
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_package_json(project_dir: Path) -> Callable[[], dict[str, Any]]:
    return lambda: json.loads((project_dir / "package.json").read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Mock collaborators
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_pm(tool_dir: Path) -> MagicMock:
    """PackageManager double: async commands are mocks, link_string is real."""
    pm = MagicMock(spec=PackageManager)
    pm.name = "npm"
    pm.init = AsyncMock(return_value=None)
    pm.install = AsyncMock(return_value=None)
    pm.publish = AsyncMock(return_value=None)
    pm.run_script = AsyncMock(return_value=None)
    pm.pack = AsyncMock(return_value=tool_dir / "create-react-prototype-0.9.0.tgz")
    pm.link_string = MagicMock(side_effect=link_string)
    return pm


@pytest.fixture
def mock_license_fetcher() -> MagicMock:
    """License fetcher that returns a GitHub-style template body."""
    fetcher = MagicMock(spec=LicenseFetcher)
    fetcher.get_license = AsyncMock(
        return_value="MIT License\n\nCopyright (c) [year] [fullname]\n"
    )
    return fetcher


@pytest.fixture
def failing_license_fetcher() -> MagicMock:
    fetcher = MagicMock(spec=LicenseFetcher)
    fetcher.get_license = AsyncMock(side_effect=LicenseLookupError("MIT", "HTTP 503"))
    return fetcher


@pytest.fixture
def mock_builder() -> MagicMock:
    builder = MagicMock(spec=BuildRunner)
    builder.run_full_build = AsyncMock(return_value=None)
    return builder


@pytest.fixture
def mock_toolchain(tool_dir: Path) -> MagicMock:
    """Toolchain double resolving every binary into the tool folder."""
    toolchain = MagicMock(spec=Toolchain)
    toolchain.resolve = AsyncMock(side_effect=lambda binary: tool_dir / "node_modules" / ".bin" / binary)
    return toolchain


@pytest.fixture
def mock_subprocess():
    """Factory for mock asyncio subprocesses.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """

    def factory(stdout: str = "", stderr: str = "", returncode: int = 0) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
