"""The ``init`` command: bootstrap a React component library.

Stages run strictly in order and any exception aborts the run.  Nothing is
rolled back, so a failed run can leave a partially scaffolded project
behind; running ``init`` again fills in whatever is missing.

1. Normalise options and ``NODE_ENV``.
2. ``npm init`` / ``yarn init``.
3. Adjust ``package.json``.
4. Copy scaffolding.
5. Install dependencies.
6. Initial build.
7. Install the example and storybook projects, if present.
"""

from __future__ import annotations

from collections.abc import Callable

from . import PACKAGE_NAME
from .build import BuildRunner
from .config import InitOptions, ProjectPaths, Settings, ensure_node_env
from .logger import Logger
from .package_manager import PackageManager
from .scaffolder.copier import Scaffolder
from .scaffolder.license import LicenseFetcher
from .scaffolder.manifest import adjust_package_json
from .utils import path_exists


class Initializer:
    """Drives one ``init`` run against a project folder."""

    def __init__(
        self,
        options: InitOptions,
        paths: ProjectPaths,
        logger: Logger,
        package_manager: PackageManager,
        scaffolder: Scaffolder,
        builder: BuildRunner,
    ) -> None:
        self.options = options
        self.paths = paths
        self.logger = logger
        self.pm = package_manager
        self.scaffolder = scaffolder
        self.builder = builder

    @classmethod
    def create(
        cls,
        options: InitOptions,
        paths: ProjectPaths | None = None,
        settings: Settings | None = None,
        logger: Logger | None = None,
    ) -> "Initializer":
        """Wire up the default collaborators for *options*."""
        settings = settings or Settings.from_env()
        paths = paths or ProjectPaths.for_project(tool_folder=settings.tool_folder)
        logger = logger or Logger(debug=options.debug)
        pm = PackageManager(options.package_manager, logger=logger)
        scaffolder = Scaffolder(
            paths,
            pm,
            LicenseFetcher(settings),
            logger,
            max_concurrency=settings.max_concurrency,
        )
        return cls(options, paths, logger, pm, scaffolder, BuildRunner(paths, pm, logger))

    async def run(self, callback: Callable[[], None] | None = None) -> None:
        node_env = ensure_node_env()
        self.logger.debug("NODE_ENV:", node_env)
        self.logger.debug("Options:", self.options.model_dump())

        self.logger.info(
            f"Welcome to {PACKAGE_NAME}. Let's get started with setting up your package.json ..."
        )
        self.logger.info("Tip: Fill it out properly, we'll read it and assume you entered correct data!")
        if self.options.yes:
            self.logger.warning(
                "The '--yes' flag has been set. This will skip the package.json questions, "
                "which has possible security implications."
            )
        await self.pm.init(self.paths.project_folder, yes=self.options.yes)

        self.logger.info("Nice! Now we'll shove some of our configuration into your package.json ...")
        await adjust_package_json(self.options, self.paths, self.pm)

        self.logger.info("We will now set up your project with some default files ...")
        await self.scaffolder.copy_scaffolding(self.options)

        self.logger.info("Installing library ...")
        await self.pm.install(self.paths.project_folder)

        self.logger.info("Creating initial build ...")
        await self.builder.run_full_build()

        if await path_exists(self.paths.example_folder):
            self.logger.info("Installing example ...")
            await self.pm.install(self.paths.example_folder)

        if await path_exists(self.paths.storybook_folder):
            self.logger.info("Installing storybook ...")
            await self.pm.install(self.paths.storybook_folder)

        self.logger.success(
            f"Created a new React library in '{self.paths.project_folder}' -- Happy coding!"
        )
        if callback is not None:
            callback()
