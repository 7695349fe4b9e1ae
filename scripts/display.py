#!/usr/bin/env python3
"""
Display settings script.

Shows and changes the resolution and scale of a wlroots output through
wlr-randr. Results are printed as JSON.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from display_control.core import DEFAULT_OUTPUT
from display_control import probe
from display_control.controller import ApplyOutcome, DisplaySettingsController
from display_control.matcher import index_of


def _controller(args) -> DisplaySettingsController:
    return DisplaySettingsController(output=args.output, timeout=args.timeout)


def cmd_status(args) -> dict:
    """Show the active mode and scale and their registry indices."""
    controller = _controller(args)
    try:
        text = probe.probe(controller.output, timeout=args.timeout)
    except probe.ProbeError as e:
        return {"error": f"Query failed: {e}"}

    outputs = probe.list_outputs(text)
    if controller.output not in outputs:
        return {"error": f"Output {controller.output} not found", "outputs": outputs}

    mode = probe.extract_mode(text, controller.output)
    scale = probe.extract_scale(text, controller.output)
    return {
        "output": controller.output,
        "outputs": outputs,
        "mode": str(mode) if mode else None,
        "mode_index": index_of(controller.resolutions, mode) if mode else None,
        "scale": str(scale) if scale else None,
        "scale_index": index_of(controller.scales, scale) if scale else None,
    }


def cmd_options(args) -> dict:
    """List the supported resolutions and scales."""
    controller = _controller(args)
    return {
        "resolutions": controller.resolutions.labels(),
        "scales": controller.scales.labels(),
    }


def cmd_apply(args) -> dict:
    """Apply a resolution and scale by index."""
    controller = _controller(args)
    errors = []
    controller.connect_error(errors.append)

    outcome = controller.apply(args.mode_index, args.scale_index)
    if outcome is ApplyOutcome.ERROR:
        return {"error": errors[0] if errors else "Apply failed", "outcome": outcome.value}

    return {
        "outcome": outcome.value,
        "mode": str(controller.resolutions[args.mode_index]),
        "scale": str(controller.scales[args.scale_index]),
        "confirmation_required": outcome is ApplyOutcome.CHANGED,
    }


def cmd_reset(args) -> dict:
    """Restore the native resolution and 100% scale."""
    controller = _controller(args)
    ok = controller.reset_to_default()
    if not ok:
        return {"error": f"Restore failed: {controller.last_error}", "restored": True}
    return {"restored": True}


def cmd_probe(args) -> dict:
    """Print the raw query output."""
    try:
        return {"text": probe.probe(args.output, timeout=args.timeout)}
    except probe.ProbeError as e:
        return {"error": f"Query failed: {e}"}


def main():
    parser = argparse.ArgumentParser(
        description="Display resolution and scale settings"
    )
    parser.add_argument(
        "--output",
        default=None,
        help=f"Output device to target (default: {DEFAULT_OUTPUT})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout for wlr-randr calls (seconds)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Show current resolution and scale")
    subparsers.add_parser("options", help="List supported resolutions and scales")

    p_apply = subparsers.add_parser("apply", help="Apply resolution and scale by index")
    p_apply.add_argument("mode_index", type=int, help="Resolution index (0 = native)")
    p_apply.add_argument("scale_index", type=int, help="Scale index (0 = 100%%)")

    subparsers.add_parser("reset", help="Restore native resolution and 100%% scale")
    subparsers.add_parser("probe", help="Show raw wlr-randr output")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr
    )

    commands = {
        "status": cmd_status,
        "options": cmd_options,
        "apply": cmd_apply,
        "reset": cmd_reset,
        "probe": cmd_probe,
    }

    handler = commands.get(args.command)
    if handler:
        result = handler(args)
    else:
        result = {"error": f"Unknown command: {args.command}"}

    print(json.dumps(result, indent=2))
    sys.exit(0 if "error" not in result else 1)


if __name__ == "__main__":
    main()
