"""
Summary calculator — fixed-shape stats derived from one Snapshot.

Used on fresh import and on restore, and its result is cached on the import
row. Must stay pure: the same snapshot always yields the same Summary.
"""
from dataclasses import dataclass
from typing import Dict, Iterable

from mission_control.models.enums import ActivityType, Stage


@dataclass(frozen=True)
class Summary:
    activity_count: Dict[str, int]
    prospect_count: int
    won_count: int
    won_revenue: float


def empty_activity_count() -> Dict[str, int]:
    """One zeroed slot per activity type, in enum order."""
    return {activity_type.value: 0 for activity_type in ActivityType}


def compute_summary(snapshot) -> Summary:
    """Live activities only; archived weeks are history, not this week's work."""
    counts = empty_activity_count()
    for activity in snapshot.activities:
        counts[activity.type.value] += 1

    won = [p for p in snapshot.prospects if p.stage is Stage.WON]
    return Summary(
        activity_count=counts,
        prospect_count=len(snapshot.prospects),
        won_count=len(won),
        won_revenue=sum_deal_values(p.deal_value for p in won),
    )


def sum_deal_values(deal_values: Iterable) -> float:
    """Sum deal values, treating missing or non-numeric entries as 0."""
    total = 0.0
    for value in deal_values:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            total += value
    return total


def activity_total(counts) -> int:
    """Total of the four activity counts; tolerates partial or missing mappings."""
    counts = counts or {}
    return sum(int(counts.get(activity_type.value) or 0) for activity_type in ActivityType)
