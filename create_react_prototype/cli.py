"""Command-line entry point.

Usage::

    create-react-prototype init
    create-react-prototype init --yes --dependency none --noExample
    create-react-prototype build
    create-react-prototype test -- --watch
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from . import PACKAGE_NAME, __version__
from .build import BuildRunner
from .config import DEPENDENCY_MODES, InitOptions, ProjectPaths, Settings
from .initializer import Initializer
from .jest import run_tests
from .logger import Logger
from .package_manager import PackageManager
from .scaffolder.manifest import ManifestError, load_package_json
from .toolchain import Toolchain

# Commands the generated ``package.json`` scripts call, mapped to their help.
PROJECT_COMMANDS: dict[str, str] = {
    "build": "Compiles src/ into dist/ with Babel",
    "watch": "Recompiles dist/ whenever src/ changes",
    "release": "Builds and publishes the library",
    "pack": "Builds the library and packs it into a tarball",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PACKAGE_NAME,
        description="Bootstrap and maintain React component libraries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            f"  {PACKAGE_NAME} init\n"
            f"  {PACKAGE_NAME} init --yes --packageManager yarn\n"
            f"  {PACKAGE_NAME} init -D npm@1.2.0 --noStorybook\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Creates a new react library")
    init.add_argument(
        "-Y", "--yes",
        action="store_true",
        help="Skip package.json creation questions.",
    )
    init.add_argument(
        "-D", "--dependency",
        default=None,
        help=(
            f"Decides on how to add {PACKAGE_NAME} as a dependency. "
            f"(Possible values: {'/'.join(DEPENDENCY_MODES)}/npm@<version>)"
        ),
    )
    init.add_argument(
        "-P", "--packageManager",
        dest="package_manager",
        choices=["npm", "yarn"],
        default=None,
        help="The package manager to use. (Possible values: npm/yarn)",
    )
    init.add_argument("--debug", action="store_true", help="Activates debug output for this command")
    init.add_argument(
        "--noExample",
        dest="no_example",
        action="store_true",
        help="Opt out of creating an example project.",
    )
    init.add_argument(
        "--noStorybook",
        dest="no_storybook",
        action="store_true",
        help="Opt out of creating a storybook project.",
    )
    init.add_argument(
        "-C", "--cwd",
        default=None,
        help="Project folder (default: the current directory)",
    )

    test = subparsers.add_parser("test", help="Runs the library's tests with Jest")
    _add_project_arguments(test)
    test.add_argument("jest_args", nargs=argparse.REMAINDER, help="Arguments passed on to Jest")

    for name, help_text in PROJECT_COMMANDS.items():
        _add_project_arguments(subparsers.add_parser(name, help=help_text))

    return parser


def _add_project_arguments(command: argparse.ArgumentParser) -> None:
    command.add_argument("--debug", action="store_true", help="Activates debug output for this command")
    command.add_argument("-C", "--cwd", default=None, help="Project folder (default: the current directory)")


async def _project_package_manager(paths: ProjectPaths, logger: Logger) -> PackageManager:
    """Use the package manager recorded in the project's ``package.json``."""
    try:
        recorded = (await load_package_json(paths.package_json)).package_manager or "npm"
    except ManifestError:
        recorded = "npm"
    # Corepack-style values carry a version: ``yarn@1.22.19``.
    name = recorded.split("@")[0]
    return PackageManager(name if name in ("npm", "yarn") else "npm", logger=logger)


async def _run(args: argparse.Namespace, logger: Logger) -> None:
    settings = Settings.from_env()
    paths = ProjectPaths.for_project(args.cwd, tool_folder=settings.tool_folder)

    if args.command in PROJECT_COMMANDS:
        pm = await _project_package_manager(paths, logger)
        runner = BuildRunner(paths, pm, logger)
        await getattr(runner, args.command)()
    elif args.command == "init":
        options = InitOptions.normalize(
            dependency=args.dependency,
            package_manager=args.package_manager,
            yes=args.yes,
            debug=args.debug,
            no_example=args.no_example,
            no_storybook=args.no_storybook,
        )
        await Initializer.create(options, paths=paths, settings=settings, logger=logger).run()
    elif args.command == "test":
        jest_args = list(args.jest_args)
        if jest_args[:1] == ["--"]:
            jest_args = jest_args[1:]
        pm = await _project_package_manager(paths, logger)
        await run_tests(paths, logger, Toolchain(paths, pm, logger), jest_args)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-react-prototype``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = Logger(debug=args.debug)

    try:
        asyncio.run(_run(args, logger))
    except KeyboardInterrupt:
        logger.error("Aborted.")
        sys.exit(130)
    except Exception as exc:  # noqa: BLE001
        logger.error(str(exc))
        if args.debug:
            logger.console.print_exception()
        sys.exit(1)


if __name__ == "__main__":
    main()
