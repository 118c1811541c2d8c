"""create-react-prototype configuration.

Typed configuration for the ``init`` and ``test`` commands.  All settings use
Pydantic v2 models so they are validated at construction time:

* ``Settings`` -- tool-wide tunables, optionally read from the environment.
* ``InitOptions`` -- the normalised, immutable flags of one ``init`` run.
* ``ProjectPaths`` -- canonical absolute paths of the target project and of
  the tool's own install folder.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


_PACKAGE_DIR = Path(__file__).resolve().parent

# Bundled npm package holding the Babel/Jest toolchain and its config files.
_NODE_SUPPORT_DIR = _PACKAGE_DIR / "node_support"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when the command was configured with an unusable value."""


class UnknownDependencyModeError(ConfigError):
    """Raised for a ``--dependency`` value that is not a known mode."""

    def __init__(self, mode: str) -> None:
        self.mode = mode
        super().__init__(f"Unknown dependency mode '{mode}'.")


class ToolFolderError(ConfigError):
    """Raised when the tool folder is not an npm package."""

    def __init__(self, folder: Path) -> None:
        self.folder = folder
        super().__init__(
            f"Tool folder '{folder}' has no package.json; point CRP_TOOL_FOLDER at a "
            "create-react-prototype npm package."
        )


# ---------------------------------------------------------------------------
# Dependency modes
# ---------------------------------------------------------------------------

DEPENDENCY_MODES: tuple[str, ...] = ("npm", "local", "tgz", "none", "retain")

# ``npm@1.2.3`` pins the declared version instead of using our own.
NPM_VERSION_PREFIX = "npm@"

PackageManagerName = Literal["npm", "yarn"]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    """Tool-wide settings that are not part of a single command invocation."""

    license_api_url: str = Field(default="https://api.github.com")
    github_token: str | None = Field(default=None, repr=False)
    http_timeout: float = Field(default=10.0, gt=0, description="License lookup timeout in seconds")
    max_concurrency: int = Field(
        default=16, ge=1, description="Maximum concurrent template file copies"
    )
    tool_folder: Path | None = Field(
        default=None, description="Folder packed or linked by the tgz/local dependency modes"
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            CRP_LICENSE_API_URL, CRP_HTTP_TIMEOUT, CRP_MAX_CONCURRENCY,
            CRP_TOOL_FOLDER, GITHUB_TOKEN.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CRP_LICENSE_API_URL"):
            kwargs["license_api_url"] = os.environ["CRP_LICENSE_API_URL"]
        if os.environ.get("CRP_HTTP_TIMEOUT"):
            kwargs["http_timeout"] = float(os.environ["CRP_HTTP_TIMEOUT"])
        if os.environ.get("CRP_MAX_CONCURRENCY"):
            kwargs["max_concurrency"] = int(os.environ["CRP_MAX_CONCURRENCY"])
        if os.environ.get("CRP_TOOL_FOLDER"):
            kwargs["tool_folder"] = Path(os.environ["CRP_TOOL_FOLDER"])
        if os.environ.get("GITHUB_TOKEN"):
            kwargs["github_token"] = os.environ["GITHUB_TOKEN"]
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# Init options
# ---------------------------------------------------------------------------


class InitOptions(BaseModel):
    """Normalised options of the ``init`` command.

    Instances are created once from the CLI flags and never mutated.  The
    ``dependency`` value is validated lazily by the package.json step so an
    unknown mode fails the run before the manifest is rewritten.
    """

    model_config = ConfigDict(frozen=True)

    dependency: str = Field(default="npm")
    package_manager: PackageManagerName = Field(default="npm")
    yes: bool = False
    debug: bool = False
    no_example: bool = False
    no_storybook: bool = False

    @classmethod
    def normalize(
        cls,
        *,
        dependency: str | None = None,
        package_manager: str | None = None,
        yes: Any = False,
        debug: Any = False,
        no_example: Any = False,
        no_storybook: Any = False,
    ) -> "InitOptions":
        """Fill in defaults and coerce flag values to booleans."""
        return cls(
            dependency=dependency or "npm",
            package_manager=package_manager or "npm",
            yes=bool(yes),
            debug=bool(debug),
            no_example=bool(no_example),
            no_storybook=bool(no_storybook),
        )


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


class ProjectPaths(BaseModel):
    """Canonical paths used by every command.

    ``project_folder`` is the project being scaffolded.  ``tool_folder`` is
    the npm package carrying the Node toolchain (the bundled ``node_support``
    folder unless overridden); it is what ``local`` and ``tgz`` dependency
    modes point at and where missing toolchain binaries are installed.
    ``template_folder`` holds the bundled scaffolding.
    """

    project_folder: Path = Field(default_factory=Path.cwd)
    tool_folder: Path = Field(default=_NODE_SUPPORT_DIR)
    template_folder: Path = Field(default=_PACKAGE_DIR / "scaffolder" / "templates")

    @classmethod
    def for_project(
        cls,
        project_folder: str | Path | None = None,
        tool_folder: str | Path | None = None,
    ) -> "ProjectPaths":
        root = Path(project_folder) if project_folder else Path.cwd()
        if tool_folder is None:
            return cls(project_folder=root.resolve())
        return cls(project_folder=root.resolve(), tool_folder=Path(tool_folder).resolve())

    @property
    def package_json(self) -> Path:
        return self.project_folder / "package.json"

    @property
    def source_folder(self) -> Path:
        return self.project_folder / "src"

    @property
    def dist_folder(self) -> Path:
        return self.project_folder / "dist"

    @property
    def example_folder(self) -> Path:
        return self.project_folder / "example"

    @property
    def storybook_folder(self) -> Path:
        return self.project_folder / "storybook"

    @property
    def tool_package_json(self) -> Path:
        return self.tool_folder / "package.json"

    @property
    def support_folder(self) -> Path:
        """Bundled Babel config and Jest transform/setup files."""
        return _NODE_SUPPORT_DIR

    def relative(self, path: Path) -> str:
        """Return *path* relative to the project folder, POSIX-style."""
        return Path(os.path.relpath(path, self.project_folder)).as_posix()


def ensure_node_env(default: str = "development") -> str:
    """Default ``NODE_ENV`` for child processes and return its value."""
    os.environ["NODE_ENV"] = os.environ.get("NODE_ENV") or default
    return os.environ["NODE_ENV"]
