"""
Apply resolution and scale changes via wlr-randr.

Each call changes the live output immediately. There is no dry run and
no rollback: if the scale fails after the mode was applied, the output
is left with the new mode and the old scale.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .core import run_cmd, get_tool, get_output, get_search_path, get_timeout
from .options import DisplayMode

logger = logging.getLogger(__name__)

# Appended to every custom mode; not derived from the panel.
CUSTOM_REFRESH_RATE = 60

SCALE_MULTIPLIERS = {0: 1.0, 1: 1.25, 2: 1.5}


@dataclass
class ApplyResult:
    """Outcome of one mutation command."""
    ok: bool
    returncode: int = 0
    stderr: str = ""

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        if self.ok:
            return {"ok": True}
        return {"ok": False, "returncode": self.returncode, "error": self.stderr}


def scale_multiplier(index: int) -> float:
    """Multiplier for a scale index; unknown indices fall back to 1.0."""
    return SCALE_MULTIPLIERS.get(index, 1.0)


def _run_randr(
    args: list[str],
    output: Optional[str],
    tool: Optional[str],
    search_path: Optional[str],
    timeout: Optional[float]
) -> ApplyResult:
    exe = get_tool(tool)
    cmd = [exe, "--output", get_output(output)] + args
    result = run_cmd(cmd, get_search_path(search_path), get_timeout(timeout))

    if not result.spawned:
        logger.error("Failed to execute %s: %s", exe, result.stderr)
        return ApplyResult(ok=False, returncode=result.returncode, stderr=result.stderr)
    if not result.success:
        logger.error("%s error: %s", exe, result.stderr)
        return ApplyResult(ok=False, returncode=result.returncode, stderr=result.stderr)

    logger.debug("%s %s output: %s", exe, " ".join(args), result.stdout)
    return ApplyResult(ok=True)


def apply_mode(
    mode: DisplayMode,
    is_custom: bool,
    output: Optional[str] = None,
    tool: Optional[str] = None,
    search_path: Optional[str] = None,
    timeout: Optional[float] = None
) -> ApplyResult:
    """
    Set the resolution of an output.

    The native mode is set with ``--mode WxH``; any other mode is set
    with ``--custom-mode WxH@60``.

    Args:
        mode: Resolution to apply
        is_custom: False for the output's native mode (index 0)
        output: Output device name
        tool: randr executable to run
        search_path: PATH for the child process
        timeout: Command timeout in seconds

    Returns:
        ApplyResult, truthy on success
    """
    if is_custom:
        args = ["--custom-mode", f"{mode}@{CUSTOM_REFRESH_RATE}"]
    else:
        args = ["--mode", str(mode)]
    return _run_randr(args, output, tool, search_path, timeout)


def apply_scale(
    index: int,
    output: Optional[str] = None,
    tool: Optional[str] = None,
    search_path: Optional[str] = None,
    timeout: Optional[float] = None
) -> ApplyResult:
    """
    Set the scale of an output from a scale index.

    Args:
        index: Selected scale index (0 = 100%, 1 = 125%, 2 = 150%)
        output: Output device name
        tool: randr executable to run
        search_path: PATH for the child process
        timeout: Command timeout in seconds

    Returns:
        ApplyResult, truthy on success
    """
    factor = scale_multiplier(index)
    return _run_randr(["--scale", format(factor, "g")], output, tool, search_path, timeout)
