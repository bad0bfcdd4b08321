"""Stat budget normalisation.

A character has four attributes, each in [STAT_MIN, STAT_MAX], that must sum
to exactly STAT_TOTAL. Providers are asked to respect this but routinely
don't, so every generated stat line goes through normalize_stats():

  1. clamp each value into [minimum, maximum]
  2. remaining = total - sum(clamped)
  3. while remaining != 0, walk the attributes in STAT_ORDER moving one point
     at a time: +1 on any attribute below maximum when remaining > 0, -1 on any
     attribute above minimum when remaining < 0. Each pass restarts at
     strength and stops as soon as remaining reaches 0.
  4. a pass that changes nothing means the total is unreachable within the
     bounds; the clamped values are returned as-is and a warning is logged.

The order and the one-point step are part of the contract: the same input
always produces the same output.
"""

from __future__ import annotations

import logging
from typing import Mapping

logger = logging.getLogger(__name__)

STAT_MIN = 1
STAT_MAX = 5
STAT_TOTAL = 10

STAT_ORDER = ("strength", "dexterity", "intelligence", "charisma")


def clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def normalize_stats(
    values: Mapping[str, int],
    *,
    minimum: int = STAT_MIN,
    maximum: int = STAT_MAX,
    total: int = STAT_TOTAL,
) -> tuple[dict[str, int], bool]:
    """Return (stats, balanced).

    ``stats`` holds one entry per name in STAT_ORDER. ``balanced`` is False only
    when ``total`` cannot be reached within the bounds; the stats are then the
    best-effort result (every value still in bounds).
    """
    stats = {name: clamp(int(values[name]), minimum, maximum) for name in STAT_ORDER}
    remaining = total - sum(stats.values())

    # Every productive pass moves at least one point, so this many passes is
    # always enough when the total is reachable.
    max_passes = max(1, len(STAT_ORDER) * (maximum - minimum))

    for _ in range(max_passes):
        if remaining == 0:
            break
        changed = False
        for name in STAT_ORDER:
            if remaining > 0 and stats[name] < maximum:
                stats[name] += 1
                remaining -= 1
                changed = True
            elif remaining < 0 and stats[name] > minimum:
                stats[name] -= 1
                remaining += 1
                changed = True
            if remaining == 0:
                break
        if not changed:
            break

    if remaining != 0:
        logger.warning(
            "Stat budget unreachable: total=%d bounds=[%d, %d] off by %d; keeping clamped values %s",
            total, minimum, maximum, remaining, stats,
        )
        return stats, False
    return stats, True
