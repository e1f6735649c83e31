"""
Tests for the install/uninstall subprocess runner.
"""

from unittest.mock import patch

import pytest

from plugin_dashboard.core.actions import (
    PluginActionResult,
    install_plugin,
    run_plugin_action,
    uninstall_plugin,
)
from plugin_dashboard.lib.errors import ActionFailed, ErrorCode

PLUGIN = "context7@claude-plugins-official"


class TestRunPluginAction:
    @pytest.mark.asyncio
    async def test_install_success(self, fake_plugin_command, tmp_path):
        log = tmp_path / "args.txt"
        command = fake_plugin_command(f'echo "$@" > "{log}"')

        result = await install_plugin(PLUGIN, command)

        assert result.success
        assert result.message == f"Installed {PLUGIN}"
        assert result.error is None
        assert log.read_text().strip() == f"install {PLUGIN}"

    @pytest.mark.asyncio
    async def test_uninstall_success(self, fake_plugin_command):
        result = await uninstall_plugin(PLUGIN, fake_plugin_command("exit 0"))
        assert result.success
        assert result.verb == "uninstall"
        assert result.message == f"Uninstalled {PLUGIN}"

    @pytest.mark.asyncio
    async def test_argv_prefix_is_kept(self, fake_plugin_command, tmp_path):
        log = tmp_path / "args.txt"
        command = fake_plugin_command(f'echo "$@" > "{log}"') + ["plugin"]
        await run_plugin_action("install", PLUGIN, command)
        assert log.read_text().strip() == f"plugin install {PLUGIN}"

    @pytest.mark.asyncio
    async def test_plugin_id_not_shell_interpreted(self, fake_plugin_command, tmp_path):
        log = tmp_path / "args.txt"
        marker = tmp_path / "pwned"
        command = fake_plugin_command(f'printf "%s" "$2" > "{log}"')
        hostile = f"x; touch {marker}"

        result = await run_plugin_action("install", hostile, command)

        assert result.success
        assert log.read_text() == hostile
        assert not marker.exists()

    @pytest.mark.asyncio
    async def test_failure_reports_stderr(self, fake_plugin_command):
        command = fake_plugin_command('echo "some output"; echo "Plugin not found" >&2; exit 2')
        result = await install_plugin(PLUGIN, command)
        assert not result.success
        assert result.message == f"Failed to install {PLUGIN}"
        assert result.error == "Plugin not found"

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_stdout(self, fake_plugin_command):
        result = await install_plugin(PLUGIN, fake_plugin_command('echo "network down"; exit 1'))
        assert result.error == "network down"

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_exit_code(self, fake_plugin_command):
        result = await uninstall_plugin(PLUGIN, fake_plugin_command("exit 3"))
        assert not result.success
        assert result.error == "Exit code: 3"

    @pytest.mark.asyncio
    async def test_missing_executable(self, tmp_path):
        result = await install_plugin(PLUGIN, [str(tmp_path / "no-such-claude")])
        assert not result.success
        assert result.message == "Failed to execute plugin command"
        assert result.error

    @pytest.mark.asyncio
    async def test_uses_configured_command(self, fake_plugin_command, tmp_path):
        log = tmp_path / "args.txt"
        command = fake_plugin_command(f'echo "$@" > "{log}"')
        with patch(
            "plugin_dashboard.config.Settings.plugin_command_argv",
            new=property(lambda self: command),
        ):
            result = await install_plugin(PLUGIN)
        assert result.success
        assert log.read_text().strip() == f"install {PLUGIN}"


class TestPluginActionResult:
    def test_describe_success(self):
        result = PluginActionResult(
            verb="install", plugin_id=PLUGIN, success=True, message=f"Installed {PLUGIN}"
        )
        assert result.describe() == f"✅ Installed {PLUGIN}"

    def test_describe_failure(self):
        result = PluginActionResult(
            verb="uninstall",
            plugin_id=PLUGIN,
            success=False,
            message=f"Failed to uninstall {PLUGIN}",
            error="busy",
        )
        assert result.describe() == f"❌ Failed to uninstall {PLUGIN}: busy"

    def test_as_error(self):
        result = PluginActionResult(
            verb="install", plugin_id=PLUGIN, success=False, message="x", error="boom"
        )
        error = result.as_error()
        assert isinstance(error, ActionFailed)
        assert error.code is ErrorCode.ACTION_FAILED
        assert error.message == f"Failed to install {PLUGIN}: boom"
