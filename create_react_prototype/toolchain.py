"""Locates the Node binaries (Babel, Jest) the project commands run.

Binaries are looked up in the project's ``node_modules/.bin`` first (where
the ``npm``, ``local`` and ``tgz`` dependency modes install them) and then in
the tool folder's.  If neither has the binary, the tool folder's
dependencies are installed once and the lookup is retried.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from .config import ProjectPaths, ToolFolderError
from .logger import Logger
from .package_manager import PackageManager
from .utils import path_exists


class ToolchainError(Exception):
    """Raised when a Node binary is not available after installing."""

    def __init__(self, binary: str, searched: list[Path]) -> None:
        self.binary = binary
        self.searched = searched
        folders = ", ".join(str(folder) for folder in searched)
        super().__init__(f"Could not find '{binary}' in {folders}")


class Toolchain:
    def __init__(self, paths: ProjectPaths, package_manager: PackageManager, logger: Logger) -> None:
        self.paths = paths
        self.pm = package_manager
        self.logger = logger

    @property
    def bin_folders(self) -> list[Path]:
        return [
            self.paths.project_folder / "node_modules" / ".bin",
            self.paths.tool_folder / "node_modules" / ".bin",
        ]

    def _find(self, binary: str) -> Path | None:
        for folder in self.bin_folders:
            # npm writes ``.cmd`` shims on Windows.
            for name in (binary, f"{binary}.cmd"):
                candidate = folder / name
                if candidate.is_file():
                    return candidate
        return None

    async def ensure_installed(self) -> None:
        """Install the tool folder's dependencies unless already present."""
        if await path_exists(self.paths.tool_folder / "node_modules"):
            return
        if not await path_exists(self.paths.tool_package_json):
            raise ToolFolderError(self.paths.tool_folder)
        self.logger.info("Installing the create-react-prototype toolchain ...")
        await self.pm.install(self.paths.tool_folder)

    async def resolve(self, binary: str) -> Path:
        found = await asyncio.to_thread(self._find, binary)
        if found is None:
            await self.ensure_installed()
            found = await asyncio.to_thread(self._find, binary)
        if found is None:
            raise ToolchainError(binary, self.bin_folders)
        self.logger.debug("Using", binary, "from", str(found))
        return found
