"""Tests for building and running editor commands."""
import asyncio

import pytest

from wsrecall.shared.config.models import LaunchConfig
from wsrecall.shared.errors import LaunchError
from wsrecall.shared.models.location import LaunchTarget, LocationKind
from wsrecall.pipeline.launch.launcher import WorkspaceLauncher, build_command
from wsrecall.resolver.distribution_validator import DistributionValidator


@pytest.mark.parametrize("target,expected", [
    (LaunchTarget("vscode-remote://wsl+Ubuntu/home/me"), ["code", "--folder-uri", "vscode-remote://wsl+Ubuntu/home/me"]),
    (LaunchTarget("ssh://devbox/srv"), ["code", "--folder-uri", "ssh://devbox/srv"]),
    (LaunchTarget("codespaces://codespaces+x/w"), ["code", "--folder-uri", "codespaces://codespaces+x/w"]),
    (LaunchTarget("file:///root/p.code-workspace", True), ["code", "--file-uri", "file:///root/p.code-workspace"]),
    (LaunchTarget("file:///home/me/app"), ["code", "--folder-uri", "file:///home/me/app"]),
    (LaunchTarget("c:/code/app"), ["code", "c:/code/app"]),
])
def test_build_command(target, expected):
    assert build_command("code", target) == expected


def test_build_command_new_window():
    assert build_command("code", LaunchTarget("c:/x"), new_window=True) == ["code", "-n", "c:/x"]


def make_launcher(fake_wsl_runner, editor_runner, **config):
    validator = DistributionValidator(runner=fake_wsl_runner(["Ubuntu"]))
    return WorkspaceLauncher(LaunchConfig(**config), validator, runner=editor_runner)


def test_force_new_window_from_config(fake_wsl_runner, fake_editor_runner):
    launcher = make_launcher(fake_wsl_runner, fake_editor_runner(), code_command="code-insiders", force_new_window=True)
    assert launcher.build_command(LaunchTarget("c:/x")) == ["code-insiders", "-n", "c:/x"]


def test_resolve(fake_wsl_runner, fake_editor_runner):
    launcher = make_launcher(fake_wsl_runner, fake_editor_runner())
    location, target = asyncio.run(launcher.resolve("\\\\wsl$\\ubuntu\\home\\me\\app"))

    assert location.kind == LocationKind.WSL
    assert target.uri == "vscode-remote://wsl+Ubuntu/home/me/app"


def test_launch_runs_editor(fake_wsl_runner, fake_editor_runner):
    runner = fake_editor_runner()
    launcher = make_launcher(fake_wsl_runner, runner)

    async def go():
        location, target = await launcher.resolve("c:/code/app")
        return await launcher.launch(target, location, new_window=True)

    command = asyncio.run(go())
    assert command == ["code", "-n", "c:/code/app"]
    assert runner.calls == [command]


def test_launch_failure_has_kind_guidance(fake_wsl_runner, fake_editor_runner):
    launcher = make_launcher(fake_wsl_runner, fake_editor_runner(returncode=1, stderr="cannot connect"))

    async def go():
        location, target = await launcher.resolve("\\\\wsl$\\Ubuntu\\home\\me\\app")
        await launcher.launch(target, location)

    with pytest.raises(LaunchError) as excinfo:
        asyncio.run(go())
    assert "exit code 1" in excinfo.value.message
    assert "cannot connect" in excinfo.value.message
    assert "WSL extension" in excinfo.value.guidance


def test_missing_editor(fake_wsl_runner, fake_editor_runner):
    launcher = make_launcher(fake_wsl_runner, fake_editor_runner(error=FileNotFoundError("code")))

    async def go():
        location, target = await launcher.resolve("c:/code/app")
        await launcher.launch(target, location)

    with pytest.raises(LaunchError, match="not found") as excinfo:
        asyncio.run(go())
    assert "PATH" in excinfo.value.guidance


def test_timeout(fake_wsl_runner, fake_editor_runner):
    launcher = make_launcher(fake_wsl_runner, fake_editor_runner(error=asyncio.TimeoutError()))

    async def go():
        location, target = await launcher.resolve("vscode-remote://ssh-remote+devbox/srv")
        await launcher.launch(target, location)

    with pytest.raises(LaunchError) as excinfo:
        asyncio.run(go())
    assert "remote host" in excinfo.value.guidance
