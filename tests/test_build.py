"""Tests for building, packing and releasing a project."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from create_react_prototype.build import TEST_FILE_GLOB, BuildError, BuildRunner
from create_react_prototype.package_manager import PackageManagerError

pytestmark = pytest.mark.unit


@pytest.fixture
def runner(paths, mock_pm, logger, mock_toolchain) -> BuildRunner:
    return BuildRunner(paths, mock_pm, logger, toolchain=mock_toolchain)


def _babel_exit(returncode: int = 0) -> AsyncMock:
    return AsyncMock(return_value=(returncode, "", ""))


# ---------------------------------------------------------------------------
# Initial build
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_runs_build_script_in_project(paths, mock_pm, logger, project_dir):
    await BuildRunner(paths, mock_pm, logger).run_full_build()
    mock_pm.run_script.assert_awaited_once_with("build", project_dir)


@pytest.mark.asyncio
async def test_failure_wrapped(paths, mock_pm, logger):
    mock_pm.run_script.side_effect = PackageManagerError("npm command failed (exit 2): npm run build")

    with pytest.raises(BuildError, match="Build failed") as exc_info:
        await BuildRunner(paths, mock_pm, logger).run_full_build()

    assert isinstance(exc_info.value.__cause__, PackageManagerError)


# ---------------------------------------------------------------------------
# Babel
# ---------------------------------------------------------------------------


class TestBabelArgs:
    def test_compiles_src_into_dist(self, runner, project_dir):
        args = runner.babel_args()
        assert args[0] == str(project_dir / "src")
        assert args[args.index("--out-dir") + 1] == str(project_dir / "dist")
        assert args[-1] == "--delete-dir-on-start"

    def test_uses_bundled_config_and_skips_tests(self, runner, paths):
        args = runner.babel_args()
        assert args[args.index("--config-file") + 1] == str(paths.support_folder / "babel.config.js")
        assert args[args.index("--ignore") + 1] == TEST_FILE_GLOB
        assert "--no-babelrc" in args
        assert "--no-copy-ignored" in args

    def test_watch(self, runner):
        args = runner.babel_args(watch=True)
        assert args[-1] == "--watch"
        assert "--delete-dir-on-start" not in args


class TestBuild:
    @pytest.mark.asyncio
    async def test_runs_resolved_babel(self, runner, mock_toolchain, project_dir, tool_dir, log_output):
        babel = _babel_exit()
        with patch("create_react_prototype.build.run_command", babel):
            await runner.build()

        mock_toolchain.resolve.assert_awaited_once_with("babel")
        cmd = babel.call_args.args[0]
        assert cmd[0] == str(tool_dir / "node_modules" / ".bin" / "babel")
        assert cmd[1:] == runner.babel_args()
        assert babel.call_args.kwargs == {"cwd": project_dir, "capture": False}
        assert "Building 'src' into 'dist' ..." in log_output()
        assert "Build finished." in log_output()

    @pytest.mark.asyncio
    async def test_babel_failure(self, runner, log_output):
        with patch("create_react_prototype.build.run_command", _babel_exit(1)):
            with pytest.raises(BuildError, match="babel exited with code 1"):
                await runner.build()
        assert "Build finished." not in log_output()

    @pytest.mark.asyncio
    async def test_watch_passes_watch_flag(self, runner):
        babel = _babel_exit()
        with patch("create_react_prototype.build.run_command", babel):
            await runner.watch()
        assert babel.call_args.args[0][-1] == "--watch"


# ---------------------------------------------------------------------------
# Pack & release
# ---------------------------------------------------------------------------


class TestPack:
    @pytest.mark.asyncio
    async def test_builds_then_packs_project(
        self, runner, mock_pm, project_dir, write_package_json, sample_package_json
    ):
        write_package_json(sample_package_json)
        tarball = project_dir / "my-lib-1.0.0.tgz"
        mock_pm.pack.return_value = tarball

        babel = _babel_exit()
        with patch("create_react_prototype.build.run_command", babel):
            result = await runner.pack()

        babel.assert_awaited_once()
        mock_pm.pack.assert_awaited_once_with(project_dir, project_dir, sample_package_json)
        assert result == tarball

    @pytest.mark.asyncio
    async def test_pack_failure_wrapped(self, runner, mock_pm, write_package_json):
        write_package_json({"name": "my-lib", "version": "1.0.0"})
        mock_pm.pack.side_effect = PackageManagerError("npm command failed (exit 1): npm pack")

        with patch("create_react_prototype.build.run_command", _babel_exit()):
            with pytest.raises(BuildError, match="Pack failed"):
                await runner.pack()

    @pytest.mark.asyncio
    async def test_failed_build_is_not_packed(self, runner, mock_pm, write_package_json):
        write_package_json({"name": "my-lib"})
        with patch("create_react_prototype.build.run_command", _babel_exit(2)):
            with pytest.raises(BuildError):
                await runner.pack()
        mock_pm.pack.assert_not_awaited()


class TestRelease:
    @pytest.mark.asyncio
    async def test_builds_then_publishes(self, runner, mock_pm, project_dir, log_output):
        with patch("create_react_prototype.build.run_command", _babel_exit()):
            await runner.release()

        mock_pm.publish.assert_awaited_once_with(project_dir)
        assert "Released." in log_output()

    @pytest.mark.asyncio
    async def test_failed_build_is_not_published(self, runner, mock_pm):
        with patch("create_react_prototype.build.run_command", _babel_exit(1)):
            with pytest.raises(BuildError):
                await runner.release()
        mock_pm.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_failure_wrapped(self, runner, mock_pm):
        mock_pm.publish.side_effect = PackageManagerError("npm command failed (exit 1): npm publish")

        with patch("create_react_prototype.build.run_command", _babel_exit()):
            with pytest.raises(BuildError, match="Release failed") as exc_info:
                await runner.release()

        assert isinstance(exc_info.value.__cause__, PackageManagerError)
