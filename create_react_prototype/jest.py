"""Jest configuration and invocation for scaffolded projects.

The ``test`` script injected into ``package.json`` calls
``create-react-prototype test``, which lands here: we build a Jest config
rooted at the project's ``src`` folder and run Jest with it.
"""

from __future__ import annotations

import json
from typing import Any

from .config import ProjectPaths
from .logger import Logger
from .toolchain import Toolchain
from .utils import run_command


class TestRunError(Exception):
    """Raised when Jest reports failures or cannot be started."""

    __test__ = False

    def __init__(self, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(f"Jest exited with code {returncode}")


def jest_config(paths: ProjectPaths) -> dict[str, Any]:
    """Return the Jest configuration for the project described by *paths*."""
    module_paths = [
        str(paths.project_folder / "node_modules"),
        str(paths.tool_folder / "node_modules"),
    ]
    return {
        "verbose": True,
        "modulePathIgnorePatterns": [str(paths.dist_folder)],
        "transform": {
            r"^.+\.js$": str(paths.support_folder / "transform.js"),
        },
        "modulePaths": module_paths,
        "moduleFileExtensions": ["js", "jsx"],
        "rootDir": str(paths.source_folder),
        "testURL": "http://localhost",
        "setupFiles": [str(paths.support_folder / "setup.js")],
    }


async def run_tests(
    paths: ProjectPaths,
    logger: Logger,
    toolchain: Toolchain,
    extra_args: list[str] | None = None,
) -> None:
    """Run Jest in the project folder with :func:`jest_config`."""
    jest = await toolchain.resolve("jest")
    config = jest_config(paths)
    logger.debug("Jest config:", config)
    cmd = [str(jest), "--config", json.dumps(config), *(extra_args or [])]
    returncode, _, _ = await run_command(cmd, cwd=paths.project_folder, capture=False)
    if returncode != 0:
        raise TestRunError(returncode)
