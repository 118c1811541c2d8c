"""npm / yarn adapter.

Wraps the handful of package-manager operations the commands need
(``init``, ``install``, ``pack``, ``publish``, ``run``) behind one
interface, so the rest of the tool never builds a command line itself.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from .logger import Logger
from .utils import run_command

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]


class PackageManagerError(Exception):
    """Raised when an npm or yarn invocation exits with a non-zero code."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


_INIT_ARGS: dict[str, list[str]] = {"npm": ["init"], "yarn": ["init"]}
_INSTALL_ARGS: dict[str, list[str]] = {"npm": ["install"], "yarn": ["install"]}


def tarball_name(pkg: dict[str, Any]) -> str:
    """Return the file name ``npm pack`` gives a package.

    Scoped names drop the ``@`` and replace the slash:
    ``@acme/widgets`` 1.0.0 -> ``acme-widgets-1.0.0.tgz``.
    """
    name = str(pkg.get("name", "package")).lstrip("@").replace("/", "-")
    return f"{name}-{pkg.get('version', '0.0.0')}.tgz"


def link_string(directory: str | Path) -> str:
    """Return a dependency specifier that links to a local directory."""
    return f"file:{Path(directory).as_posix()}"


class PackageManager:
    """Runs npm or yarn commands against a directory.

    Args:
        name: ``"npm"`` or ``"yarn"``.
        logger: Logger used for command tracing.
        runner: Coroutine used to spawn processes; replaced in tests.
    """

    def __init__(
        self,
        name: str = "npm",
        logger: Logger | None = None,
        runner: CommandRunner = run_command,
    ) -> None:
        if name not in _INSTALL_ARGS:
            raise ValueError(f"Unsupported package manager '{name}' (expected npm or yarn)")
        self.name = name
        self.logger = logger or Logger()
        self._runner = runner

    async def _run(
        self,
        args: list[str],
        cwd: str | Path,
        *,
        capture: bool = True,
    ) -> str:
        cmd = [self.name, *args]
        cmd_str = " ".join(cmd)
        self.logger.debug("Running:", cmd_str, "in", str(cwd))
        returncode, stdout, stderr = await self._runner(cmd, cwd=cwd, capture=capture)
        if returncode != 0:
            raise PackageManagerError(
                f"{self.name} command failed (exit {returncode}): {cmd_str}\n{stderr}",
                command=cmd_str,
                stderr=stderr,
            )
        return stdout

    async def init(self, cwd: str | Path, yes: bool = False) -> None:
        """Create ``package.json`` in *cwd*.

        Without ``yes`` the package manager asks its questions on the
        terminal, so output is not captured and there is no timeout.
        """
        args = list(_INIT_ARGS[self.name])
        if yes:
            args.append("--yes")
        await self._run(args, cwd, capture=False)

    async def install(self, cwd: str | Path) -> None:
        await self._run(list(_INSTALL_ARGS[self.name]), cwd, capture=False)

    async def publish(self, cwd: str | Path) -> None:
        await self._run(["publish"], cwd, capture=False)

    async def run_script(self, script: str, cwd: str | Path, *args: str) -> None:
        """Run a ``package.json`` script, forwarding extra arguments."""
        cmd = ["run", script]
        if args:
            if self.name == "npm":
                cmd.append("--")
            cmd.extend(args)
        await self._run(cmd, cwd, capture=False)

    async def pack(self, directory: str | Path, output_dir: str | Path, pkg: dict[str, Any]) -> Path:
        """Pack *directory* into a tarball inside *output_dir*.

        Returns:
            The absolute path of the written tarball.
        """
        output = Path(output_dir).resolve()
        filename = tarball_name(pkg)
        if self.name == "yarn":
            await self._run(["pack", "--filename", str(output / filename)], directory)
            return output / filename

        stdout = await self._run(["pack", "--pack-destination", str(output)], directory)
        # npm prints the tarball name as the last line of stdout.
        lines = [line.strip() for line in stdout.splitlines() if line.strip()]
        if lines and lines[-1].endswith(".tgz"):
            filename = lines[-1]
        return output / filename

    def link_string(self, directory: str | Path) -> str:
        return link_string(directory)
