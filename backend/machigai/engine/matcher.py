"""
Difference matcher - decides whether a click hits an undiscovered difference.

Coordinates are in the normalized 0-100 space used by Difference.x/y.
"""

from __future__ import annotations

import math
from typing import Iterable

from machigai.models.game import Difference

# Approximately 7% of the image dimensions
HIT_RADIUS = 7.0


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x1 - x2, y1 - y2)


def _id_order(difference_id: str) -> tuple:
    """Numeric ids sort numerically and before non-numeric ids."""
    if difference_id.isdecimal():
        return (0, int(difference_id), difference_id)
    return (1, 0, difference_id)


def match(
    x: float,
    y: float,
    differences: Iterable[Difference],
    radius: float = HIT_RADIUS,
) -> Difference | None:
    """Find the difference hit by a click.

    Only differences that are not yet found and lie strictly within the
    radius are candidates. The nearest candidate wins; candidates at the
    same distance are ordered by id.

    Args:
        x: Click x in 0-100
        y: Click y in 0-100
        differences: Differences to test (found ones are skipped)
        radius: Hit radius in the same units

    Returns:
        The matched Difference, or None on a miss
    """
    candidates = []
    for difference in differences:
        if difference.found:
            continue
        d = distance(x, y, difference.x, difference.y)
        if d < radius:
            candidates.append((d, _id_order(difference.id), difference))

    if not candidates:
        return None

    candidates.sort(key=lambda c: (c[0], c[1]))
    return candidates[0][2]
