"""Tests for the Prometheus and NDJSON encoders."""

import json

import pytest

from rdsexporter.core.encoding.ndjson import encode_logs, encode_messages
from rdsexporter.core.encoding.prometheus import encode_samples
from rdsexporter.core.metrics import counter, gauge, summary
from rdsexporter.core.models import LogEntry, MetricSample


class TestPrometheusEncoder:
    """Tests for encode_samples."""

    @pytest.mark.core
    def test_empty_input_returns_empty_string(self) -> None:
        assert encode_samples([]) == ""

    @pytest.mark.core
    def test_gauge_with_help_and_sorted_labels(self) -> None:
        sample = MetricSample(
            name="node_load1",
            timestamp=1709294400.0,
            value=0.25,
            labels={"region": "us-east-1", "instance": "orders"},
            help="The number of processes requesting CPU time over the last minute.",
            type="gauge",
        )

        assert encode_samples([sample]) == (
            "# HELP node_load1 The number of processes requesting CPU time over "
            "the last minute.\n"
            "# TYPE node_load1 gauge\n"
            'node_load1{instance="orders",region="us-east-1"} 0.25\n'
        )

    @pytest.mark.core
    def test_timestamps_are_milliseconds(self) -> None:
        sample = MetricSample(name="up", timestamp=1709294400.5, value=1)

        assert encode_samples([sample], with_timestamps=True).endswith(
            "up 1.0 1709294400500\n"
        )

    @pytest.mark.core
    def test_families_are_grouped_in_first_seen_order(self) -> None:
        samples = [
            MetricSample(name="b", timestamp=0, value=1, labels={"i": "1"}),
            MetricSample(name="a", timestamp=0, value=2),
            MetricSample(name="b", timestamp=0, value=3, labels={"i": "2"}),
        ]

        lines = encode_samples(samples).splitlines()

        assert lines == [
            "# TYPE b untyped",
            'b{i="1"} 1.0',
            'b{i="2"} 3.0',
            "# TYPE a untyped",
            "a 2.0",
        ]

    @pytest.mark.core
    def test_declared_type_is_emitted(self) -> None:
        samples = [
            counter("rds_exporter_requests_total", 3),
            gauge("rdsosmetrics_memory_total", 4096),
        ]

        text = encode_samples(samples)

        assert "# TYPE rds_exporter_requests_total counter" in text
        assert "# TYPE rdsosmetrics_memory_total gauge" in text

    @pytest.mark.core
    def test_summary_parts_share_one_family(self) -> None:
        samples = [
            *summary("latency_seconds", 1.5, 3, {"status": "200"}, help_text="Lat."),
            *summary("latency_seconds", 0.5, 1, {"status": "err"}),
        ]

        lines = encode_samples(samples).splitlines()

        assert lines == [
            "# HELP latency_seconds Lat.",
            "# TYPE latency_seconds summary",
            'latency_seconds_sum{status="200"} 1.5',
            'latency_seconds_count{status="200"} 3.0',
            'latency_seconds_sum{status="err"} 0.5',
            'latency_seconds_count{status="err"} 1.0',
        ]

    @pytest.mark.core
    def test_label_values_are_escaped(self) -> None:
        sample = MetricSample(
            name="m", timestamp=0, value=1, labels={"path": 'C:\\dir "x"\n'}
        )

        assert 'm{path="C:\\\\dir \\"x\\"\\n"} 1.0' in encode_samples([sample])

    @pytest.mark.core
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(float("nan"), "NaN"), (float("inf"), "+Inf"), (float("-inf"), "-Inf")],
    )
    def test_special_values(self, value: float, expected: str) -> None:
        sample = MetricSample(name="m", timestamp=0, value=value)

        assert encode_samples([sample]).splitlines()[-1] == f"m {expected}"


class TestNdjsonEncoder:
    """Tests for NDJSON encoding of log entries and raw messages."""

    @pytest.mark.core
    def test_encode_entry_with_attributes(self) -> None:
        entry = LogEntry(
            timestamp=1702300000.0,
            level="ERROR",
            message="Failed to find instance",
            attributes={"log_stream_name": "db-ABC", "lineno": 42},
        )

        parsed = json.loads(encode_logs([entry]))

        assert parsed == {
            "timestamp": 1702300000.0,
            "level": "ERROR",
            "message": "Failed to find instance",
            "attributes": {"log_stream_name": "db-ABC", "lineno": 42},
        }

    @pytest.mark.core
    def test_empty_inputs(self) -> None:
        assert encode_logs([]) == ""
        assert encode_messages({}) == ""

    @pytest.mark.core
    def test_messages_are_sorted_by_resource_id(self) -> None:
        text = encode_messages({"db-B": '{"b": 1}', "db-A": '{"a": 1}'})

        lines = [json.loads(line) for line in text.splitlines()]
        assert lines == [
            {"resource_id": "db-A", "message": '{"a": 1}'},
            {"resource_id": "db-B", "message": '{"b": 1}'},
        ]
        assert text.endswith("\n")
