"""
Plugin install/uninstall through the Claude Code CLI.

Runs ``claude plugin <install|uninstall> <plugin-id>`` as a subprocess with
an argv list, so plugin ids are never interpreted by a shell. Failures,
including a missing executable, come back as results rather than exceptions.
"""

import asyncio
import logging
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from plugin_dashboard.config import get_settings
from plugin_dashboard.lib.errors import ActionFailed

logger = logging.getLogger(__name__)

ActionVerb = Literal["install", "uninstall"]


class PluginActionResult(BaseModel):
    """Outcome of one install/uninstall invocation."""

    verb: ActionVerb
    plugin_id: str
    success: bool
    message: str
    error: Optional[str] = None

    def describe(self) -> str:
        """One-line status text for the dashboard."""
        if self.success:
            return f"✅ {self.message}"
        suffix = f": {self.error}" if self.error else ""
        return f"❌ {self.message}{suffix}"

    def as_error(self) -> ActionFailed:
        return ActionFailed(self.verb, self.plugin_id, self.error)


async def run_plugin_action(
    verb: ActionVerb,
    plugin_id: str,
    command: Optional[Sequence[str]] = None,
) -> PluginActionResult:
    """Run the plugin command for ``verb`` and wait for it to exit.

    Args:
        verb: "install" or "uninstall"
        plugin_id: "<name>@<marketplace>"
        command: argv prefix; defaults to the configured plugin_command

    Returns:
        A successful result on exit status 0, otherwise a failed result
        carrying stderr, stdout or the exit code as diagnostic.
    """
    argv = list(command) if command is not None else get_settings().plugin_command_argv
    logger.info(f"Running: {' '.join(argv)} {verb} {plugin_id}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv, verb, plugin_id,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error(f"Failed to launch plugin command {argv}: {e}")
        return PluginActionResult(
            verb=verb,
            plugin_id=plugin_id,
            success=False,
            message="Failed to execute plugin command",
            error=str(e),
        )

    stdout, stderr = await proc.communicate()

    if proc.returncode == 0:
        done = "Installed" if verb == "install" else "Uninstalled"
        logger.info(f"{done} {plugin_id}")
        return PluginActionResult(
            verb=verb,
            plugin_id=plugin_id,
            success=True,
            message=f"{done} {plugin_id}",
        )

    diagnostic = (
        stderr.decode(errors="replace").strip()
        or stdout.decode(errors="replace").strip()
        or f"Exit code: {proc.returncode}"
    )
    logger.warning(f"Failed to {verb} {plugin_id}: {diagnostic}")
    return PluginActionResult(
        verb=verb,
        plugin_id=plugin_id,
        success=False,
        message=f"Failed to {verb} {plugin_id}",
        error=diagnostic,
    )


async def install_plugin(plugin_id: str, command: Optional[Sequence[str]] = None) -> PluginActionResult:
    return await run_plugin_action("install", plugin_id, command)


async def uninstall_plugin(plugin_id: str, command: Optional[Sequence[str]] = None) -> PluginActionResult:
    return await run_plugin_action("uninstall", plugin_id, command)
