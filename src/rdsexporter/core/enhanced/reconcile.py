"""Selection of the latest event per instance and of the next poll watermark."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime


def reconcile(
    timestamps_by_instance: Mapping[str, Iterable[datetime]],
    now: datetime | None = None,
) -> tuple[dict[str, datetime], datetime]:
    """Pick one timestamp per instance and the start time of the next poll.

    Each instance keeps its newest event timestamp. The next watermark is the
    oldest of those per-instance maxima, so the next query still covers the
    slowest-reporting instance. It never moves past ``now``, and falls back to
    ``now`` when no instance reported anything, which keeps the query window
    bounded while the feed is idle.

    Args:
        timestamps_by_instance: Resource id -> event timestamps seen this poll.
        now: Current time; defaults to the wall clock.

    Returns:
        Tuple of (resource id -> selected timestamp, next watermark).
    """
    if now is None:
        now = datetime.now(UTC)

    selected: dict[str, datetime] = {}
    for resource_id, timestamps in timestamps_by_instance.items():
        newest = max(timestamps, default=None)
        if newest is not None:
            selected[resource_id] = newest

    watermark = min(selected.values(), default=now)
    return selected, min(watermark, now)
