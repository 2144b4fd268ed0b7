"""
Hours Match Resolver - Compares a package's base hours with the event duration.

A zero-hour base or event is meaningless for pricing, so 0 and None both
mean "unset". normalize_hours is the only place that rule is applied.
"""
from dataclasses import dataclass
from typing import Optional


def normalize_hours(value: Optional[float]) -> Optional[float]:
    """Return the hours as a float, or None when unset (None or 0)."""
    if value is None or value == 0:
        return None
    return float(value)


@dataclass(frozen=True)
class HoursMatch:
    """Outcome of comparing base hours against the event duration."""
    constraint_set: bool
    hours_match: bool


class HoursMatchResolver:
    """
    Decides whether the event duration matches the package's base hours.

    constraint_set is True only when both durations are set. hours_match
    additionally requires exact numeric equality, with no tolerance.
    """

    def resolve(self, base_hours: Optional[float], duration_hours: Optional[float]) -> HoursMatch:
        base = normalize_hours(base_hours)
        duration = normalize_hours(duration_hours)

        constraint_set = base is not None and duration is not None
        return HoursMatch(
            constraint_set=constraint_set,
            hours_match=constraint_set and base == duration,
        )
