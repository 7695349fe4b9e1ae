"""
Read the active display state from wlr-randr.

wlr-randr prints one block per output: an unindented header line that
starts with the output name, followed by indented detail lines::

    eDP-1 "Sharp Corporation 0x1515 (eDP-1)"
      Enabled: yes
      Modes:
        1920x1200 px, 60.000000 Hz (preferred, current)
        1280x800 px, 60.000000 Hz
      Position: 0,0
      Transform: normal
      Scale: 1.250000
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from .core import run_cmd, get_tool, get_output, get_search_path, get_timeout
from .options import DisplayMode, ScaleOption

logger = logging.getLogger(__name__)

_CURRENT_MODE_RE = re.compile(r"(\d+x\d+)\s*px[^\n]*current")
_SCALE_RE = re.compile(r"Scale:\s*([\d.]+)")


class ProbeError(Exception):
    """Raised when the query command does not produce usable output."""
    pass


class ExecutionFailed(ProbeError):
    """The query command could not be started or timed out."""
    pass


class NonZeroExit(ProbeError):
    """The query command exited with a non-zero status."""

    def __init__(self, returncode: int, stderr: str):
        super().__init__(f"exit status {returncode}: {stderr}")
        self.returncode = returncode
        self.stderr = stderr


@dataclass
class ProbedState:
    """Active mode and scale of one output; None where not found."""
    mode: Optional[DisplayMode] = None
    scale: Optional[ScaleOption] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "mode": str(self.mode) if self.mode else None,
            "scale": str(self.scale) if self.scale else None,
        }


def probe(
    output: Optional[str] = None,
    tool: Optional[str] = None,
    search_path: Optional[str] = None,
    timeout: Optional[float] = None
) -> str:
    """
    Run the query command and return its standard output.

    Args:
        output: Output device the caller is interested in (for logging)
        tool: randr executable to run
        search_path: PATH for the child process
        timeout: Command timeout in seconds

    Returns:
        Captured stdout text

    Raises:
        ExecutionFailed: If the command could not be run
        NonZeroExit: If the command exited with a non-zero status
    """
    exe = get_tool(tool)
    result = run_cmd([exe], get_search_path(search_path), get_timeout(timeout))
    if not result.spawned:
        logger.error("Failed to execute %s: %s", exe, result.stderr)
        raise ExecutionFailed(f"Failed to execute {exe}: {result.stderr}")
    if not result.success:
        logger.error("%s error: %s", exe, result.stderr)
        raise NonZeroExit(result.returncode, result.stderr)

    logger.debug("Probed %s for output %s", exe, get_output(output))
    return result.stdout


def list_outputs(text: str) -> list[str]:
    """Names of all outputs that have a block in the query text."""
    outputs = []
    for line in text.splitlines():
        if line and not line[0].isspace():
            outputs.append(line.split()[0])
    return outputs


def _output_block(text: str, output: str) -> Optional[str]:
    """Return the header and detail lines of ``output``'s block."""
    block: Optional[list[str]] = None
    for line in text.splitlines():
        is_header = bool(line) and not line[0].isspace()
        if block is not None:
            if is_header:
                break
            block.append(line)
        elif is_header and line.split()[0] == output:
            block = [line]
    if block is None:
        return None
    return "\n".join(block)


def extract_mode(text: str, output: Optional[str] = None) -> Optional[DisplayMode]:
    """
    Extract the mode marked "current" for an output.

    Args:
        text: Query command output
        output: Output device name

    Returns:
        DisplayMode, or None if the output or its current mode is missing
    """
    output = get_output(output)
    block = _output_block(text, output)
    if block is None:
        logger.warning("Output %s not found in query output", output)
        return None

    match = _CURRENT_MODE_RE.search(block)
    if not match:
        logger.warning("No current resolution found for %s", output)
        return None

    try:
        mode = DisplayMode.parse(match.group(1))
    except ValueError:
        logger.warning("Invalid resolution %r for %s", match.group(1), output)
        return None

    logger.debug("Current resolution: %s", mode)
    return mode


def extract_scale(text: str, output: Optional[str] = None) -> Optional[ScaleOption]:
    """
    Extract the scale factor of an output as a percentage option.

    Args:
        text: Query command output
        output: Output device name

    Returns:
        ScaleOption (e.g. "125%" for "Scale: 1.25"), or None if missing
        or unparsable
    """
    output = get_output(output)
    block = _output_block(text, output)
    if block is None:
        logger.warning("Output %s not found in query output", output)
        return None

    match = _SCALE_RE.search(block)
    if not match:
        logger.warning("No current scale found for %s", output)
        return None

    try:
        multiplier = float(match.group(1))
    except ValueError:
        logger.warning("Failed to parse scale %r", match.group(1))
        return None

    if not math.isfinite(multiplier) or multiplier <= 0:
        logger.warning("Invalid scale %r for %s", match.group(1), output)
        return None

    scale = ScaleOption.from_multiplier(multiplier)
    logger.debug("Current scale: %s (%s)", multiplier, scale)
    return scale


def probe_state(
    output: Optional[str] = None,
    tool: Optional[str] = None,
    search_path: Optional[str] = None,
    timeout: Optional[float] = None
) -> ProbedState:
    """
    Probe and extract the active mode and scale of an output.

    Raises:
        ProbeError: If the query command fails
    """
    output = get_output(output)
    text = probe(output, tool=tool, search_path=search_path, timeout=timeout)
    return ProbedState(
        mode=extract_mode(text, output),
        scale=extract_scale(text, output)
    )
