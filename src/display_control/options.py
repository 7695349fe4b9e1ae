"""
Supported display options: resolutions and scale factors.

The registries are ordered; index 0 is always the native resolution or
the unscaled 100% option, and the index is what callers use to select
and apply an option.
"""

import re
from dataclasses import dataclass, field
from typing import Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")

_MODE_RE = re.compile(r"^(\d+)x(\d+)$")

# Taken from /sys/kernel/debug/dri/0/i915_display_info of the target panel.
DEFAULT_RESOLUTIONS = ("1920x1200", "1936x1203", "1952x1217", "2104x1236")
DEFAULT_SCALES = (1.0, 1.25, 1.5)


@dataclass(frozen=True)
class DisplayMode:
    """A resolution such as 1920x1200."""
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid resolution: {self.width}x{self.height}")

    @classmethod
    def parse(cls, text: str) -> "DisplayMode":
        """Parse a ``WIDTHxHEIGHT`` string."""
        match = _MODE_RE.match(text.strip())
        if not match:
            raise ValueError(f"Invalid resolution: {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class ScaleOption:
    """A scale factor shown as a percentage, e.g. 125% for 1.25."""
    label: str
    multiplier: float = field(compare=False)

    @classmethod
    def from_multiplier(cls, multiplier: float) -> "ScaleOption":
        return cls(f"{round(multiplier * 100)}%", multiplier)

    def __str__(self) -> str:
        return self.label


class SupportedOptionSet(Generic[T]):
    """
    Ordered, read-only sequence of selectable options.

    The set is never reordered once built; a new registry replaces the
    old one as a whole.
    """

    def __init__(self, options: Iterable[T] = ()):
        self._options: tuple[T, ...] = tuple(options)

    def __getitem__(self, index: int) -> T:
        return self._options[index]

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[T]:
        return iter(self._options)

    def __repr__(self) -> str:
        return f"SupportedOptionSet({[str(o) for o in self._options]})"

    def has_index(self, index: int) -> bool:
        """Check whether ``index`` selects an option in this set."""
        return 0 <= index < len(self._options)

    def labels(self) -> list[str]:
        """Option labels in order, for display."""
        return [str(option) for option in self._options]


def populate_resolutions() -> SupportedOptionSet[DisplayMode]:
    """Build the resolution registry, native resolution first."""
    return SupportedOptionSet(DisplayMode.parse(r) for r in DEFAULT_RESOLUTIONS)


def populate_scales() -> SupportedOptionSet[ScaleOption]:
    """Build the scale registry, 100% first."""
    return SupportedOptionSet(ScaleOption.from_multiplier(s) for s in DEFAULT_SCALES)
