"""Copies the bundled scaffolding into the target project.

Every file is run through the placeholder formatter on its way.  Files and
folders that already exist in the project are never overwritten, so running
the copy again only fills in what is missing.
"""

from __future__ import annotations

import asyncio
import os
from datetime import date
from pathlib import Path, PurePosixPath

from ..config import InitOptions, ProjectPaths
from ..logger import Logger
from ..package_manager import PackageManager
from ..utils import path_exists, read_text, write_text
from .formatter import TemplateArgs, format_template, with_json_variants
from .license import LicenseFetcher, LicenseLookupError
from .manifest import load_package_json

GITIGNORE_TEMPLATE = """# Default create-react-prototype .gitignore for [name]
node_modules/
dist/
*.tgz
"""

DEFAULT_LICENSE_TEMPLATE = "LICENSE"


class Scaffolder:
    """Writes license, ignore file, docs and template trees into a project.

    Args:
        paths: Project and template locations.
        package_manager: Used to build the ``[link:dist]`` specifier.
        license_fetcher: Source of license texts.
        logger: Receives trace output for every created file and warnings
            for skipped folders.
        max_concurrency: Upper bound on template files read and written at
            the same time.
    """

    def __init__(
        self,
        paths: ProjectPaths,
        package_manager: PackageManager,
        license_fetcher: LicenseFetcher,
        logger: Logger,
        max_concurrency: int = 16,
    ) -> None:
        self.paths = paths
        self.pm = package_manager
        self.license_fetcher = license_fetcher
        self.logger = logger
        self._io_slots = asyncio.Semaphore(max_concurrency)

    # -- Template arguments ------------------------------------------------

    async def get_file_args(self) -> dict[str, str]:
        """Build the placeholder values from the project's ``package.json``."""
        package_json = await load_package_json(self.paths.package_json)
        dist_from_source = os.path.relpath(self.paths.dist_folder, self.paths.source_folder)
        return with_json_variants({
            "description": package_json.description,
            "name": package_json.name,
            "version": package_json.version,
            "year": date.today().year,
            "license": package_json.license_id,
            "fullname": package_json.author_name,
            "link:dist": self.pm.link_string(dist_from_source),
        })

    # -- Primitive copies --------------------------------------------------

    async def copy_file(self, relative_path: str | PurePosixPath, args: TemplateArgs) -> bool:
        """Copy one template file, unless the destination already exists.

        Returns:
            ``True`` if the file was written.
        """
        rel = PurePosixPath(relative_path)
        destination = self.paths.project_folder / rel
        if await path_exists(destination):
            self.logger.trace("Exists, skipped:", str(rel))
            return False

        async with self._io_slots:
            contents = await read_text(self.paths.template_folder / rel)
            await write_text(destination, format_template(contents, args))
        self.logger.trace("Created:", str(rel))
        return True

    async def copy_directory(self, relative_path: str | PurePosixPath, args: TemplateArgs) -> None:
        """Mirror a template directory into the project.

        All entries of one level are copied concurrently and joined; the
        first failure is raised once every started sibling has finished.
        """
        rel = PurePosixPath(relative_path)
        destination = self.paths.project_folder / rel
        if not await path_exists(destination):
            await asyncio.to_thread(destination.mkdir, parents=True, exist_ok=True)
            self.logger.trace("Created:", f"{rel}/")

        source = self.paths.template_folder / rel
        entries = await asyncio.to_thread(_list_entries, source)

        async def _copy_entry(name: str, is_dir: bool) -> None:
            if is_dir:
                await self.copy_directory(rel / name, args)
            else:
                await self.copy_file(rel / name, args)

        results = await asyncio.gather(
            *(_copy_entry(name, is_dir) for name, is_dir in entries),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    # -- Named scaffolding steps -------------------------------------------

    async def create_license(self, args: TemplateArgs) -> None:
        """Write ``LICENSE``, falling back to the bundled text."""
        license_id = args.get("license", "")
        try:
            license_text = await self.license_fetcher.get_license(license_id)
        except LicenseLookupError:
            self.logger.warning(
                f"Could not get license text for license '{license_id}'. "
                "Make sure to manually update your LICENSE file!"
            )
            license_text = await read_text(self.paths.template_folder / DEFAULT_LICENSE_TEMPLATE)

        await write_text(self.paths.project_folder / "LICENSE", format_template(license_text, args))
        self.logger.trace("Created:", "./LICENSE")

    async def create_gitignore(self, args: TemplateArgs) -> None:
        destination = self.paths.project_folder / ".gitignore"
        if await path_exists(destination):
            self.logger.trace("Exists, skipped:", "./.gitignore")
            return
        await write_text(destination, format_template(GITIGNORE_TEMPLATE, args))
        self.logger.trace("Created:", "./.gitignore")

    async def _copy_folder(self, folder: Path, label: str, args: TemplateArgs) -> None:
        if await path_exists(folder):
            self.logger.warning(f"{label.capitalize()} directory already exists, not copying {label}.")
            return
        await self.copy_directory(self.paths.relative(folder), args)

    async def copy_example(self, args: TemplateArgs) -> None:
        await self._copy_folder(self.paths.example_folder, "example", args)

    async def copy_storybook(self, args: TemplateArgs) -> None:
        await self._copy_folder(self.paths.storybook_folder, "storybook", args)

    async def copy_src(self, args: TemplateArgs) -> None:
        if await path_exists(self.paths.source_folder):
            self.logger.warning("Source directory already exists, not copying demo code.")
            return
        await self.copy_directory(self.paths.relative(self.paths.source_folder), args)

    async def copy_scaffolding(self, options: InitOptions) -> dict[str, str]:
        """Run every scaffolding step in order and return the template args."""
        args = await self.get_file_args()
        self.logger.debug("Template arguments:", args)
        await self.create_license(args)
        await self.create_gitignore(args)
        await self.copy_file("README.md", args)
        await self.copy_file("CHANGELOG.md", args)
        if not options.no_example:
            await self.copy_example(args)
        if not options.no_storybook:
            await self.copy_storybook(args)
        await self.copy_src(args)
        return args


def _list_entries(directory: Path) -> list[tuple[str, bool]]:
    """Return ``(name, is_directory)`` for every entry of *directory*."""
    return sorted((entry.name, entry.is_dir()) for entry in directory.iterdir())
