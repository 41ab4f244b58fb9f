"""Decoding of Enhanced Monitoring messages into metric samples."""

from collections.abc import Callable, Iterator

from pydantic import ValidationError

from rdsexporter.core.enhanced.payload import (
    STRICT_UNKNOWN_FIELDS,
    UNKNOWN_FIELDS_ERROR,
    OSMetrics,
    Payload,
)
from rdsexporter.core.metrics import gauge
from rdsexporter.core.models import MetricSample, MonitoredInstance

_KIB = 1024

_CPU_MODES = ("guest", "idle", "irq", "nice", "steal", "system", "user", "wait")

# attribute -> (node_exporter metric name, multiplier)
_NODE_LOAD = {
    "one": ("node_load1", 1),
    "five": ("node_load5", 1),
    "fifteen": ("node_load15", 1),
}

_NODE_MEMORY = {
    "active": ("node_memory_Active_bytes", _KIB),
    "buffers": ("node_memory_Buffers_bytes", _KIB),
    "cached": ("node_memory_Cached_bytes", _KIB),
    "dirty": ("node_memory_Dirty_bytes", _KIB),
    "free": ("node_memory_MemFree_bytes", _KIB),
    "huge_pages_free": ("node_memory_HugePages_Free", 1),
    "huge_pages_rsvd": ("node_memory_HugePages_Rsvd", 1),
    "huge_pages_size": ("node_memory_Hugepagesize_bytes", _KIB),
    "huge_pages_surp": ("node_memory_HugePages_Surp", 1),
    "huge_pages_total": ("node_memory_HugePages_Total", 1),
    "inactive": ("node_memory_Inactive_bytes", _KIB),
    "mapped": ("node_memory_Mapped_bytes", _KIB),
    "page_tables": ("node_memory_PageTables_bytes", _KIB),
    "slab": ("node_memory_Slab_bytes", _KIB),
    "total": ("node_memory_MemTotal_bytes", _KIB),
    "writeback": ("node_memory_Writeback_bytes", _KIB),
}

_NODE_SWAP = {
    "cached": ("node_memory_SwapCached_bytes", _KIB),
    "free": ("node_memory_SwapFree_bytes", _KIB),
    "total": ("node_memory_SwapTotal_bytes", _KIB),
    "in_": ("node_vmstat_pswpin", 1),
    "out": ("node_vmstat_pswpout", 1),
}

_NODE_TASKS = {
    "blocked": ("node_procs_blocked", 1),
    "running": ("node_procs_running", 1),
}


class MessageParseError(ValueError):
    """Raised when a message body cannot be decoded."""


class SchemaDriftError(MessageParseError):
    """Raised in strict mode when a message carries fields the schema lacks."""


class MessageParser:
    """Decodes raw Enhanced Monitoring message bodies.

    Args:
        strict_unknown_fields: Treat keys missing from the schema as fatal
            instead of ignoring them. Meant for test suites, where it
            surfaces upstream schema changes immediately.
    """

    def __init__(self, strict_unknown_fields: bool = False) -> None:
        self.strict_unknown_fields = strict_unknown_fields

    def parse(self, body: str | bytes) -> OSMetrics:
        """Decode one message body.

        Raises:
            SchemaDriftError: In strict mode, if the body has unknown keys.
            MessageParseError: If the body is not a valid message.
        """
        try:
            return OSMetrics.model_validate_json(
                body, context={STRICT_UNKNOWN_FIELDS: self.strict_unknown_fields}
            )
        except ValidationError as exc:
            if any(error["type"] == UNKNOWN_FIELDS_ERROR for error in exc.errors()):
                raise SchemaDriftError(str(exc)) from exc
            raise MessageParseError(str(exc)) from exc


def _metric_fields(model: Payload) -> Iterator[tuple[str, str, float, str]]:
    """Yield (attribute, JSON key, value, help) of populated metric fields.

    Metric fields are the ones declared with a description; identity fields
    such as device or process names carry none.
    """
    for name, field in type(model).model_fields.items():
        if field.description is None:
            continue
        value = getattr(model, name)
        if value is None:
            continue
        yield name, field.alias or name, float(value), field.description


def make_samples(record: OSMetrics, instance: MonitoredInstance) -> list[MetricSample]:
    """Convert a decoded message into labeled samples.

    Every metric field is exported as ``rdsosmetrics_<group>_<key>``; fields
    with a node_exporter counterpart are exported under that name as well.
    All samples carry the message's own timestamp and the instance labels.
    """
    base_labels = instance.base_labels()
    timestamp = record.timestamp.timestamp()
    samples: list[MetricSample] = []

    def add(
        metric: str, value: float, help_text: str, labels: dict[str, str] | None = None
    ) -> None:
        samples.append(
            gauge(
                metric,
                value,
                {**base_labels, **(labels or {})},
                timestamp=timestamp,
                help_text=help_text,
            )
        )

    def add_group(
        group: str, model: Payload, labels: dict[str, str] | None = None
    ) -> None:
        for _, key, value, help_text in _metric_fields(model):
            add(f"rdsosmetrics_{group}_{key}", value, help_text, labels)

    add_group("General", record)
    add_group("cpuUtilization", record.cpu_utilization)
    add_group("loadAverageMinute", record.load_average_minute)
    add_group("memory", record.memory)
    add_group("swap", record.swap)
    add_group("tasks", record.tasks)
    for disk in record.disk_io:
        add_group("diskIO", disk, {"device": disk.device})
    for disk in record.physical_device_io:
        add_group("physicalDeviceIO", disk, {"device": disk.device})
    for fs in record.file_sys:
        add_group("fileSys", fs, {"name": fs.name, "mount_point": fs.mount_point})
    for nic in record.network:
        add_group("network", nic, {"interface": nic.interface})
    for process in record.process_list:
        add_group("processList", process, {"name": process.name, "id": str(process.id)})

    _add_node_samples(record, add)
    return samples


def _add_node_samples(
    record: OSMetrics, add: Callable[[str, float, str, dict[str, str] | None], None]
) -> None:
    def translate(model: Payload, table: dict[str, tuple[str, int]]) -> None:
        for attr, key, value, help_text in _metric_fields(model):
            if attr in table:
                metric, multiplier = table[attr]
                add(metric, value * multiplier, help_text, None)

    cpu = record.cpu_utilization
    for mode in _CPU_MODES:
        value = getattr(cpu, mode)
        if value is not None:
            add(
                "node_cpu_average",
                value,
                "The percentage of CPU utilization.",
                {"cpu": "All", "mode": mode},
            )

    translate(record.load_average_minute, _NODE_LOAD)
    translate(record.memory, _NODE_MEMORY)
    translate(record.swap, _NODE_SWAP)
    translate(record.tasks, _NODE_TASKS)

    for fs in record.file_sys:
        labels = {"device": fs.name, "mountpoint": fs.mount_point}
        if fs.total is not None:
            add(
                "node_filesystem_size_bytes",
                fs.total * _KIB,
                "Filesystem size in bytes.",
                labels,
            )
            if fs.used is not None:
                add(
                    "node_filesystem_free_bytes",
                    (fs.total - fs.used) * _KIB,
                    "Filesystem free space in bytes.",
                    labels,
                )
        if fs.max_files is not None:
            add(
                "node_filesystem_files",
                fs.max_files,
                "Filesystem total file nodes.",
                labels,
            )
            if fs.used_files is not None:
                add(
                    "node_filesystem_files_free",
                    fs.max_files - fs.used_files,
                    "Filesystem total free file nodes.",
                    labels,
                )
