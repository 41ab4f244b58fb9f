"""Step definitions for the watermark feature."""

import asyncio
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from rdsexporter.core.enhanced import LogEventPoller, MessageParser
from rdsexporter.core.enhanced.poller import to_millis
from rdsexporter.core.models import LogEvent, PollResult
from tests.helpers import FakeClock, at, make_event, make_instance

EVENT_LIST = r"[A-Z]@\d+(?:, [A-Z]@\d+)*"


class ScriptedLogSource:
    """Returns the next scripted events, whatever the start time."""

    def __init__(self) -> None:
        self.next_events: list[LogEvent] = []
        self.start_times: list[int] = []

    async def filter_log_events(self, log_group, stream_names, start_time_ms):
        self.start_times.append(start_time_ms)
        yield list(self.next_events)


@dataclass
class PollScenarioContext:
    """Shared state between steps in a polling scenario."""

    clock: FakeClock = field(default_factory=lambda: FakeClock(at(100)))
    source: ScriptedLogSource = field(default_factory=ScriptedLogSource)
    poller: LogEventPoller | None = None
    result: PollResult | None = None


@pytest.fixture
def ctx() -> PollScenarioContext:
    """Fresh scenario context for each test."""
    return PollScenarioContext()


def parse_events(text: str) -> list[tuple[str, int]]:
    pairs = []
    for item in text.split(", "):
        name, seconds = item.split("@")
        pairs.append((name, int(seconds)))
    return pairs


def run_poll(ctx: PollScenarioContext, events: list[LogEvent]) -> None:
    ctx.source.next_events = events
    ctx.result = asyncio.run(ctx.poller.poll())


# === Background Steps ===
@given(parsers.parse('instances "{first}" and "{second}"'))
def step_instances(ctx: PollScenarioContext, first: str, second: str) -> None:
    ctx.poller = LogEventPoller(
        ctx.source,
        [make_instance(first), make_instance(second)],
        MessageParser(strict_unknown_fields=True),
        clock=ctx.clock,
    )


@given(parsers.parse("the clock reads t={seconds:d}"))
def step_clock(ctx: PollScenarioContext, seconds: int) -> None:
    ctx.clock.now = at(seconds)


# === Poll Steps ===
@when(parsers.re(rf"a poll returns events (?P<events>{EVENT_LIST})$"))
def step_poll(ctx: PollScenarioContext, events: str) -> None:
    run_poll(ctx, [make_event(name, at(t)) for name, t in parse_events(events)])


@when(
    parsers.re(
        rf"a poll returns events (?P<events>{EVENT_LIST}) "
        r"where (?P<bad>[A-Z]@\d+) is undecodable$"
    )
)
def step_poll_with_bad_event(ctx: PollScenarioContext, events: str, bad: str) -> None:
    [bad_event] = parse_events(bad)
    built = []
    for name, t in parse_events(events):
        message = "{truncated" if (name, t) == bad_event else None
        built.append(make_event(name, at(t), message=message))
    run_poll(ctx, built)


@when("a poll returns no events")
def step_poll_nothing(ctx: PollScenarioContext) -> None:
    run_poll(ctx, [])


# === Outcome Steps ===
@then(parsers.re(rf"the selection is (?P<selection>{EVENT_LIST})$"))
def step_selection(ctx: PollScenarioContext, selection: str) -> None:
    expected = {name: at(t) for name, t in parse_events(selection)}
    actual = {
        rid: {s.timestamp for s in samples}
        for rid, samples in ctx.result.samples.items()
    }
    # every sample of an instance comes from the one selected event
    assert actual == {rid: {ts.timestamp()} for rid, ts in expected.items()}
    assert set(ctx.result.messages) == set(expected)


@then("the selection is empty")
def step_selection_empty(ctx: PollScenarioContext) -> None:
    assert ctx.result.samples == {}
    assert ctx.result.messages == {}


@then(parsers.parse("the next watermark is t={seconds:d}"))
def step_watermark(ctx: PollScenarioContext, seconds: int) -> None:
    assert ctx.result.watermark == at(seconds)
    assert ctx.poller.next_start_time == at(seconds)


@then(parsers.parse("the poll started at t={seconds:d}"))
def step_started(ctx: PollScenarioContext, seconds: int) -> None:
    assert ctx.source.start_times[-1] == to_millis(at(seconds))
