"""Building, packing and releasing a scaffolded library.

The scripts written into ``package.json`` (``build``, ``watch``,
``release``, ``pack``) call back into this tool; each one lands on a
``BuildRunner`` method.  Compilation is done by Babel with the bundled
``babel.config.js``: ``src/`` is compiled into ``dist/``, test files are
skipped.
"""

from __future__ import annotations

from pathlib import Path

from .config import ProjectPaths
from .logger import Logger
from .package_manager import PackageManager, PackageManagerError
from .scaffolder.manifest import load_package_json
from .toolchain import Toolchain
from .utils import run_command

TEST_FILE_GLOB = "**/*.test.js"


class BuildError(Exception):
    """Raised when the project build fails."""


class BuildRunner:
    """Runs the project's build-related commands.

    Args:
        paths: Project locations.
        package_manager: Used for the initial build script, ``pack`` and
            ``publish``.
        logger: Progress output.
        toolchain: Locates the Babel binary; built from the other arguments
            when omitted.
    """

    def __init__(
        self,
        paths: ProjectPaths,
        package_manager: PackageManager,
        logger: Logger,
        toolchain: Toolchain | None = None,
    ) -> None:
        self.paths = paths
        self.pm = package_manager
        self.logger = logger
        self.toolchain = toolchain or Toolchain(paths, package_manager, logger)

    async def run_full_build(self) -> None:
        """Run the project's ``build`` script, as ``init`` does."""
        self.logger.debug("Building", str(self.paths.project_folder), "into", str(self.paths.dist_folder))
        try:
            await self.pm.run_script("build", self.paths.project_folder)
        except PackageManagerError as exc:
            raise BuildError(f"Build failed: {exc}") from exc

    # -- Babel ---------------------------------------------------------------

    def babel_args(self, watch: bool = False) -> list[str]:
        args = [
            str(self.paths.source_folder),
            "--out-dir", str(self.paths.dist_folder),
            "--config-file", str(self.paths.support_folder / "babel.config.js"),
            "--no-babelrc",
            "--ignore", TEST_FILE_GLOB,
            "--copy-files",
            "--no-copy-ignored",
        ]
        args.append("--watch" if watch else "--delete-dir-on-start")
        return args

    async def _babel(self, watch: bool = False) -> None:
        babel = await self.toolchain.resolve("babel")
        cmd = [str(babel), *self.babel_args(watch)]
        self.logger.debug("Running:", " ".join(cmd))
        returncode, _, _ = await run_command(cmd, cwd=self.paths.project_folder, capture=False)
        if returncode != 0:
            raise BuildError(f"Build failed: babel exited with code {returncode}")

    # -- Commands --------------------------------------------------------------

    async def build(self) -> None:
        src = self.paths.relative(self.paths.source_folder)
        dist = self.paths.relative(self.paths.dist_folder)
        self.logger.info(f"Building '{src}' into '{dist}' ...")
        await self._babel()
        self.logger.success("Build finished.")

    async def watch(self) -> None:
        """Compile continuously until interrupted."""
        self.logger.info("Watching for changes ...")
        await self._babel(watch=True)

    async def pack(self) -> Path:
        """Build, then pack the library into a tarball in the project root."""
        await self.build()
        package_json = await load_package_json(self.paths.package_json)
        try:
            tarball = await self.pm.pack(
                self.paths.project_folder, self.paths.project_folder, package_json.to_dict()
            )
        except PackageManagerError as exc:
            raise BuildError(f"Pack failed: {exc}") from exc
        self.logger.success("Packed", self.paths.relative(tarball))
        return tarball

    async def release(self) -> None:
        """Build, then publish the library to the registry."""
        await self.build()
        self.logger.info("Publishing ...")
        try:
            await self.pm.publish(self.paths.project_folder)
        except PackageManagerError as exc:
            raise BuildError(f"Release failed: {exc}") from exc
        self.logger.success("Released.")
