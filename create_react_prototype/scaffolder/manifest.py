"""Reading, adjusting and writing the target project's ``package.json``."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, model_validator

from .. import PACKAGE_NAME, __version__
from ..config import (
    NPM_VERSION_PREFIX,
    InitOptions,
    ProjectPaths,
    ToolFolderError,
    UnknownDependencyModeError,
)
from ..package_manager import PackageManager
from ..utils import load_json, path_exists, save_json


class ManifestError(Exception):
    """Raised when ``package.json`` is missing or cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Could not read {path}: {reason}")


# ---------------------------------------------------------------------------
# Defaults written into every scaffolded project
# ---------------------------------------------------------------------------

TOOL_PACKAGE: dict[str, str] = {"name": PACKAGE_NAME, "version": __version__}

SCRIPTS: dict[str, str] = {
    script: f"{PACKAGE_NAME} {script}"
    for script in ("build", "watch", "test", "release", "pack")
}

MAIN_ENTRY = "./src/index.js"

DEFAULT_DEPENDENCIES: dict[str, str] = {"@babel/runtime": "^7.0.0-rc.1"}
DEFAULT_DEV_DEPENDENCIES: dict[str, str] = {"react": "^16.2.0", "react-dom": "^16.2.0"}
DEFAULT_PEER_DEPENDENCIES: dict[str, str] = {"react": ">=16.2.0", "react-dom": ">=16.2.0"}


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------


class PackageJson(BaseModel):
    """Typed view of ``package.json``.

    Only the keys this tool reads or writes are declared; every other key is
    kept as an extra and written back untouched.  Declared keys that were
    absent from the file and never assigned are not written back.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    version: str | None = None
    description: str | None = None
    main: str | None = None
    scripts: dict[str, str] = Field(default_factory=dict)
    author: str | dict[str, Any] | None = None
    license: str | dict[str, Any] | None = None
    generator: str | None = None
    package_manager: str | None = Field(default=None, alias="packageManager")
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str | None] = Field(default_factory=dict, alias="devDependencies")
    peer_dependencies: dict[str, str] = Field(default_factory=dict, alias="peerDependencies")

    # Key order of the source document.
    _key_order: list[str] = PrivateAttr(default_factory=list)

    @model_validator(mode="wrap")
    @classmethod
    def _remember_key_order(cls, data: Any, handler: Any) -> "PackageJson":
        package_json = handler(data)
        if isinstance(data, dict):
            package_json._key_order = list(data)
        return package_json

    @property
    def author_name(self) -> str | None:
        """Author's name, whether ``author`` is a string or a person object."""
        if isinstance(self.author, dict):
            return self.author.get("name")
        return self.author

    @property
    def license_id(self) -> str | None:
        """SPDX identifier, also for the legacy ``{"type": ...}`` object form."""
        if isinstance(self.license, dict):
            return self.license.get("type")
        return self.license

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to plain JSON data.

        Keys keep the order they had in the source document; keys that were
        added afterwards follow in declaration order.  Dependency entries
        whose value is ``None`` are dropped, the same way an undefined value
        disappears from ``JSON.stringify`` output.
        """
        dumped = self.model_dump(by_alias=True, exclude_unset=True)
        for key, value in (self.model_extra or {}).items():
            dumped.setdefault(key, value)

        data = {key: dumped[key] for key in self._key_order if key in dumped}
        data.update((key, value) for key, value in dumped.items() if key not in data)

        for section in ("dependencies", "devDependencies", "peerDependencies"):
            if isinstance(data.get(section), dict):
                data[section] = {k: v for k, v in data[section].items() if v is not None}
        return data


async def load_package_json(path: Path) -> PackageJson:
    """Read and validate ``package.json`` at *path*.

    Raises:
        ManifestError: If the file is missing, is not valid JSON, or has
            values of the wrong type for the declared keys.
    """
    try:
        raw = await load_json(path)
        return PackageJson.model_validate(raw)
    except FileNotFoundError as exc:
        raise ManifestError(path, "file not found") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    except (ValueError, ValidationError) as exc:
        raise ManifestError(path, str(exc)) from exc


async def save_package_json(package_json: PackageJson, path: Path) -> None:
    await save_json(package_json.to_dict(), path)


# ---------------------------------------------------------------------------
# Dependency resolution
# ---------------------------------------------------------------------------


async def resolve_dependency(
    options: InitOptions,
    package_json: PackageJson,
    paths: ProjectPaths,
    pm: PackageManager,
) -> str | None:
    """Decide how the project declares this tool as a dev dependency.

    Returns the version specifier, or ``None`` when no specifier should be
    written.

    Raises:
        UnknownDependencyModeError: For a mode that is neither a known mode
            nor ``npm@<version>``.
        ToolFolderError: If ``local`` or ``tgz`` targets a tool folder without
            a ``package.json``.
    """
    mode = options.dependency
    if mode in ("local", "tgz") and not await path_exists(paths.tool_package_json):
        raise ToolFolderError(paths.tool_folder)
    if mode == "npm":
        return f"^{__version__}"
    if mode == "local":
        return pm.link_string(paths.relative(paths.tool_folder))
    if mode == "tgz":
        tarball = await pm.pack(paths.tool_folder, paths.tool_folder, TOOL_PACKAGE)
        return Path(os.path.relpath(tarball, paths.project_folder)).as_posix()
    if mode == "none":
        return None
    if mode == "retain":
        return package_json.dev_dependencies.get(PACKAGE_NAME)
    if mode.startswith(NPM_VERSION_PREFIX):
        return mode[len(NPM_VERSION_PREFIX):]
    raise UnknownDependencyModeError(mode)


# ---------------------------------------------------------------------------
# Adjustment
# ---------------------------------------------------------------------------


def apply_defaults(package_json: PackageJson, options: InitOptions, dependency: str | None) -> None:
    """Inject scripts, tags and default dependency ranges in place.

    Scripts are always overwritten; dependency ranges already present in
    the manifest win over the defaults.
    """
    package_json.scripts = {**package_json.scripts, **SCRIPTS}
    package_json.generator = PACKAGE_NAME
    package_json.package_manager = options.package_manager
    package_json.main = MAIN_ENTRY

    package_json.dependencies = {**DEFAULT_DEPENDENCIES, **package_json.dependencies}

    dev_dependencies = dict(package_json.dev_dependencies)
    dev_dependencies[PACKAGE_NAME] = dependency
    package_json.dev_dependencies = {**DEFAULT_DEV_DEPENDENCIES, **dev_dependencies}

    package_json.peer_dependencies = {**DEFAULT_PEER_DEPENDENCIES, **package_json.peer_dependencies}


async def adjust_package_json(
    options: InitOptions,
    paths: ProjectPaths,
    pm: PackageManager,
) -> PackageJson:
    """Rewrite the project's ``package.json`` for use with this tool.

    The file is written exactly once, after every change has been applied,
    so a failure leaves it untouched.
    """
    package_json = await load_package_json(paths.package_json)
    dependency = await resolve_dependency(options, package_json, paths, pm)
    apply_defaults(package_json, options, dependency)
    await save_package_json(package_json, paths.package_json)
    return package_json
