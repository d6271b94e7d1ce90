"""Attendance projection arithmetic.

Every function here is pure: ``present`` is the attended count and ``total``
the number of lectures held so far.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..common.validators import require_non_negative
from ..core.constants import RISK_PERCENTAGE, SAFE_PERCENTAGE, TARGET_PERCENTAGE
from ..core.enums import RiskBand


def _check(present: int, total: int) -> None:
    require_non_negative(present, "present")
    require_non_negative(total, "total")


def _at_target(present: int, total: int) -> bool:
    # present / total >= 0.75 without float rounding.
    return 100 * present >= TARGET_PERCENTAGE * total


def percentage(present: int, total: int) -> float:
    _check(present, total)
    if total == 0:
        return 0.0
    return round(present / total * 100, 2)


def lectures_needed_for_75(present: int, total: int) -> int:
    """Smallest n with (present + n) / (total + n) >= 0.75, attending all n."""
    _check(present, total)
    if total == 0 or _at_target(present, total):
        return 0
    # ceil((0.75 t - p) / 0.25) == ceil(3t - 4p), exact in integers.
    return 3 * total - 4 * present


def max_bunkable_lectures(present: int, total: int) -> int:
    """Largest n with present / (total + n) >= 0.75, missing all n."""
    _check(present, total)
    if total == 0:
        return 0
    # floor(p / 0.75 - t) == floor((4p - 3t) / 3)
    return max(0, (4 * present - 3 * total) // 3)


def percentage_after_skipping(present: int, total: int, skip: int) -> float:
    require_non_negative(skip, "skip")
    return percentage(present, total + skip)


def lectures_needed_to_reach_75(present: int, total: int, skip: int) -> int:
    """Lectures to attend after skipping ``skip`` more before reaching 75 %."""
    _check(present, total)
    require_non_negative(skip, "skip")

    current_present = present
    current_total = total + skip
    if current_total == 0:
        return 0

    needed = 0
    while not _at_target(current_present, current_total):
        current_present += 1
        current_total += 1
        needed += 1
    return needed


def risk_band(percent: float) -> RiskBand:
    if percent >= SAFE_PERCENTAGE:
        return RiskBand.SAFE
    if percent >= RISK_PERCENTAGE:
        return RiskBand.RISK
    return RiskBand.UNSAFE


@dataclass(frozen=True)
class Projection:
    present: int
    total: int
    percentage: float
    needed_for_75: int
    bunkable: int
    band: RiskBand

    def as_dict(self) -> dict:
        return {
            "present": self.present,
            "total": self.total,
            "percentage": self.percentage,
            "needed_for_75": self.needed_for_75,
            "bunkable": self.bunkable,
            "band": self.band.value,
        }


def project(present: int, total: int) -> Projection:
    percent = percentage(present, total)
    return Projection(
        present=present,
        total=total,
        percentage=percent,
        needed_for_75=lectures_needed_for_75(present, total),
        bunkable=max_bunkable_lectures(present, total),
        band=risk_band(percent),
    )
