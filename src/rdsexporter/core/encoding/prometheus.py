"""Prometheus text exposition format encoder (version 0.0.4)."""

import math
from collections.abc import Iterable

from rdsexporter.core.models import MetricSample

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _format_value(value: float) -> str:
    """Format a sample value the way Prometheus parses it."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return repr(float(value))


def _family_name(sample: MetricSample) -> str:
    if sample.type == "summary":
        for suffix in ("_sum", "_count"):
            if sample.name.endswith(suffix):
                return sample.name.removesuffix(suffix)
    return sample.name


def _format_labels(labels: dict[str, str]) -> str:
    if not labels:
        return ""
    pairs = ",".join(
        f'{key}="{_escape_label_value(labels[key])}"' for key in sorted(labels)
    )
    return "{" + pairs + "}"


def encode_samples(
    samples: Iterable[MetricSample], with_timestamps: bool = False
) -> str:
    """Encode metric samples to Prometheus text format.

    Samples are grouped by family in first-seen order; each family gets one
    ``# HELP`` line (when any of its samples carries help text) and one
    ``# TYPE`` line taken from its first sample. The ``_sum`` and ``_count``
    samples of a summary share their family's lines.

    Args:
        samples: An iterable of MetricSample objects.
        with_timestamps: Append each sample's timestamp in milliseconds.

    Returns:
        Exposition text ending with a newline, or empty string if no samples.
    """
    families: dict[str, list[MetricSample]] = {}
    for sample in samples:
        families.setdefault(_family_name(sample), []).append(sample)

    lines: list[str] = []
    for name, family in families.items():
        help_text = next((s.help for s in family if s.help), "")
        if help_text:
            lines.append(f"# HELP {name} {_escape_help(help_text)}")
        lines.append(f"# TYPE {name} {family[0].type}")
        for sample in family:
            labels = _format_labels(sample.labels)
            line = f"{sample.name}{labels} {_format_value(sample.value)}"
            if with_timestamps:
                line += f" {round(sample.timestamp * 1000)}"
            lines.append(line)

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
