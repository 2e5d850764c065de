"""Reminder merging across pets and refresh cycles."""

from collections.abc import Iterable
from datetime import datetime

from petdash.models import Reminder


def merge_reminders(
    existing: Iterable[Reminder], incoming: Iterable[Reminder]
) -> list[Reminder]:
    """Merge two reminder collections into a new deduplicated list.

    Reminders sharing a (title, due second) key are duplicates; the first
    occurrence wins, so an existing reminder is kept over an incoming one.
    The result is sorted by due date. Inputs are not modified.
    """
    seen: set[tuple[str, int]] = set()
    merged: list[Reminder] = []
    for reminder in [*existing, *incoming]:
        key = reminder.dedup_key
        if key in seen:
            continue
        seen.add(key)
        merged.append(reminder)

    # sorted() is stable: equal due dates keep first-seen order
    return sorted(merged, key=lambda r: r.due)


def prune_expired(reminders: Iterable[Reminder], now: datetime) -> list[Reminder]:
    """Drop reminders that were due before now."""
    return [r for r in reminders if r.due >= now]
