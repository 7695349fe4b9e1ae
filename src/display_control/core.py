"""
Core utilities shared across display control modules.
"""

import math
import os
import subprocess
from dataclasses import dataclass
from typing import Optional

DEFAULT_TOOL = "wlr-randr"
DEFAULT_OUTPUT = "eDP-1"
DEFAULT_SEARCH_PATH = "/run/current-system/sw/bin"
DEFAULT_TIMEOUT = 10.0


@dataclass
class CommandResult:
    """Result of a shell command execution."""
    returncode: int
    stdout: str
    stderr: str
    spawned: bool = True

    @property
    def success(self) -> bool:
        return self.spawned and self.returncode == 0


def run_cmd(
    cmd: list[str],
    search_path: Optional[str] = None,
    timeout: Optional[float] = None
) -> CommandResult:
    """
    Run a command with a restricted PATH.

    Output is decoded permissively: invalid byte sequences are replaced
    rather than raising.

    Args:
        cmd: Command and arguments as list
        search_path: Value for PATH in the child environment
        timeout: Command timeout in seconds

    Returns:
        CommandResult with returncode, stdout, and stderr. When the
        process could not be started or timed out, ``spawned`` is False.
    """
    env = os.environ.copy()
    env["PATH"] = get_search_path(search_path)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            env=env,
            timeout=timeout
        )
        return CommandResult(
            returncode=result.returncode,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip()
        )
    except subprocess.TimeoutExpired:
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            spawned=False
        )
    except OSError as e:
        return CommandResult(
            returncode=-1,
            stdout="",
            stderr=str(e),
            spawned=False
        )


def get_tool(tool: Optional[str] = None) -> str:
    """Get the randr executable name, with fallback to default."""
    if tool:
        return tool
    return os.environ.get("DISPLAY_CONTROL_TOOL", DEFAULT_TOOL)


def get_output(output: Optional[str] = None) -> str:
    """Get the output device to target, with fallback to default."""
    if output:
        return output
    return os.environ.get("DISPLAY_CONTROL_OUTPUT", DEFAULT_OUTPUT)


def get_search_path(search_path: Optional[str] = None) -> str:
    """Get the PATH used for external commands."""
    if search_path:
        return search_path
    return os.environ.get("DISPLAY_CONTROL_PATH", DEFAULT_SEARCH_PATH)


def get_timeout(timeout: Optional[float] = None) -> float:
    """Get the command timeout in seconds."""
    if timeout is not None:
        return timeout
    value = os.environ.get("DISPLAY_CONTROL_TIMEOUT")
    if not value:
        return DEFAULT_TIMEOUT
    try:
        timeout = float(value)
    except ValueError:
        return DEFAULT_TIMEOUT
    if not math.isfinite(timeout) or timeout <= 0:
        return DEFAULT_TIMEOUT
    return timeout
