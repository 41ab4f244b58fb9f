"""In-memory storage of published poll results."""

from types import MappingProxyType

from rdsexporter.core.models import MetricSample, PollResult


class SnapshotStore:
    """In-memory implementation of SnapshotPort.

    Keeps the latest PollResult of each poll loop; a new publication from a
    loop replaces its previous one. Readers get values built from the stored
    results and must not mutate them.
    """

    def __init__(self) -> None:
        self._results: dict[str, PollResult] = {}

    async def publish(self, source: str, result: PollResult) -> None:
        """Replace the snapshot published by the given poll loop."""
        self._results[source] = result

    def snapshot(self, source: str) -> PollResult | None:
        """Return the latest result of one poll loop, if any."""
        return self._results.get(source)

    def sources(self) -> MappingProxyType[str, PollResult]:
        """Read-only view of the latest result of every poll loop."""
        return MappingProxyType(self._results)

    def read(self) -> list[MetricSample]:
        """Return the samples of every current snapshot."""
        return [
            sample
            for result in self._results.values()
            for samples in result.samples.values()
            for sample in samples
        ]

    def messages(self) -> dict[str, str]:
        """Return the raw last message of every resource id."""
        merged: dict[str, str] = {}
        for result in self._results.values():
            merged.update(result.messages)
        return merged
