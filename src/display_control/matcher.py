"""
Map probed values to their position in an option registry.
"""

from typing import Iterable, Optional, TypeVar

T = TypeVar("T")


def index_of(options: Iterable[T], value: T) -> Optional[int]:
    """
    Find the index of the first option equal to ``value``.

    Args:
        options: Ordered options to search
        value: Value to look for (exact, case-sensitive comparison)

    Returns:
        Index of the first match, or None if absent
    """
    for index, option in enumerate(options):
        if option == value:
            return index
    return None
