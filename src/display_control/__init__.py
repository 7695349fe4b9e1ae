"""
Display Control - resolution and scale settings for a wlroots output.

Reads the active mode and scale from wlr-randr, matches them against
the supported options, and applies the user's selection.
"""

from .controller import ApplyOutcome, DisplaySettingsController
from .options import DisplayMode, ScaleOption, SupportedOptionSet

__version__ = "1.0.0"
__all__ = [
    "ApplyOutcome",
    "DisplayMode",
    "DisplaySettingsController",
    "ScaleOption",
    "SupportedOptionSet",
]
