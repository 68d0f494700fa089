"""
Platform set helpers

Platform sets are stored as JSON lists of rack numbers. For matching,
order is irrelevant and a missing set (null) counts as an empty one.
"""

from typing import Iterable, Optional


def normalize_platforms(platforms: Optional[Iterable[int]]) -> list[int]:
    """Sorted copy of a platform set; None becomes []"""
    if platforms is None:
        return []
    return sorted(platforms)


def platforms_match(a: Optional[Iterable[int]], b: Optional[Iterable[int]]) -> bool:
    return normalize_platforms(a) == normalize_platforms(b)


def platforms_for_storage(platforms: Optional[Iterable[int]]) -> Optional[list[int]]:
    """Empty sets are stored as null"""
    if not platforms:
        return None
    return list(platforms)
