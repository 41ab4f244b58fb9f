"""Schema of an RDS Enhanced Monitoring message.

Enhanced Monitoring writes one JSON document per instance per interval to
the ``RDSOSMetrics`` log group. The models below cover the documents
produced for Linux-based engines (MySQL, MariaDB, PostgreSQL, Oracle and
Aurora). Field names follow the JSON keys through aliases, and each
numeric field's description becomes the help text of its metric.

Unknown keys are ignored unless validation runs with the
``strict_unknown_fields`` context flag, in which case they are reported as
``unknown_fields`` errors.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError

STRICT_UNKNOWN_FIELDS = "strict_unknown_fields"
UNKNOWN_FIELDS_ERROR = "unknown_fields"


def _metric(description: str, alias: str | None = None) -> Any:
    """Declare an optional numeric field that is exported as a metric."""
    return Field(None, alias=alias, description=description)


class Payload(BaseModel):
    """Base for every object of the document."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _reject_unknown_fields(cls, data: Any, info: ValidationInfo) -> Any:
        if not isinstance(data, dict) or not (info.context or {}).get(
            STRICT_UNKNOWN_FIELDS
        ):
            return data
        known = {field.alias or name for name, field in cls.model_fields.items()}
        unknown = sorted(set(data) - known)
        if unknown:
            raise PydanticCustomError(
                UNKNOWN_FIELDS_ERROR,
                "unknown fields in {model}: {fields}",
                {"model": cls.__name__, "fields": ", ".join(unknown)},
            )
        return data


class CPUUtilization(Payload):
    guest: float | None = _metric("The percentage of CPU in use by guest programs.")
    idle: float | None = _metric("The percentage of CPU that is idle.")
    irq: float | None = _metric("The percentage of CPU in use by software interrupts.")
    nice: float | None = _metric(
        "The percentage of CPU in use by programs running at lowest priority."
    )
    steal: float | None = _metric(
        "The percentage of CPU in use by other virtual machines."
    )
    system: float | None = _metric("The percentage of CPU in use by the kernel.")
    total: float | None = _metric(
        "The total percentage of the CPU in use. This value includes the nice value."
    )
    user: float | None = _metric("The percentage of CPU in use by user programs.")
    wait: float | None = _metric(
        "The percentage of CPU unused while waiting for I/O access."
    )


class DiskIO(Payload):
    device: str = ""
    read_ios_ps: float | None = _metric(
        "The number of read operations per second.", "readIOsPS"
    )
    write_ios_ps: float | None = _metric(
        "The number of write operations per second.", "writeIOsPS"
    )

    # not reported by Aurora
    avg_queue_len: float | None = _metric(
        "The number of requests waiting in the I/O device's queue.", "avgQueueLen"
    )
    avg_req_sz: float | None = _metric(
        "The average request size, in kilobytes.", "avgReqSz"
    )
    await_: float | None = _metric(
        "The number of milliseconds required to respond to requests, "
        "including queue time and service time.",
        "await",
    )
    read_kb: float | None = _metric("The total number of kilobytes read.", "readKb")
    read_kb_ps: float | None = _metric(
        "The number of kilobytes read per second.", "readKbPS"
    )
    rrqm_ps: float | None = _metric(
        "The number of merged read requests queued per second.", "rrqmPS"
    )
    tps: float | None = _metric("The number of I/O transactions per second.")
    util: float | None = _metric(
        "The percentage of CPU time during which requests were issued."
    )
    write_kb: float | None = _metric(
        "The total number of kilobytes written.", "writeKb"
    )
    write_kb_ps: float | None = _metric(
        "The number of kilobytes written per second.", "writeKbPS"
    )
    wrqm_ps: float | None = _metric(
        "The number of merged write requests queued per second.", "wrqmPS"
    )

    # Aurora only
    disk_queue_depth: float | None = _metric(
        "The number of outstanding IOs (read/write requests) waiting to access "
        "the disk.",
        "diskQueueDepth",
    )
    read_latency: float | None = _metric(
        "The average amount of time taken per disk I/O operation.", "readLatency"
    )
    read_throughput: float | None = _metric(
        "The average number of bytes read from disk per second.", "readThroughput"
    )
    write_latency: float | None = _metric(
        "The average amount of time taken per disk I/O operation.", "writeLatency"
    )
    write_throughput: float | None = _metric(
        "The average number of bytes written to disk per second.", "writeThroughput"
    )


class FileSys(Payload):
    name: str = ""
    mount_point: str = Field("", alias="mountPoint")
    max_files: float | None = _metric(
        "The maximum number of files that can be created for the file system.",
        "maxFiles",
    )
    total: float | None = _metric(
        "The total number of disk space available for the file system, "
        "in kilobytes."
    )
    used: float | None = _metric(
        "The amount of disk space used by files in the file system, in kilobytes."
    )
    used_file_percent: float | None = _metric(
        "The percentage of available files in use.", "usedFilePercent"
    )
    used_files: float | None = _metric(
        "The number of files in the file system.", "usedFiles"
    )
    used_percent: float | None = _metric(
        "The percentage of the file-system disk space in use.", "usedPercent"
    )


class LoadAverageMinute(Payload):
    fifteen: float | None = _metric(
        "The number of processes requesting CPU time over the last 15 minutes."
    )
    five: float | None = _metric(
        "The number of processes requesting CPU time over the last 5 minutes."
    )
    one: float | None = _metric(
        "The number of processes requesting CPU time over the last minute."
    )


class Memory(Payload):
    active: float | None = _metric("The amount of assigned memory, in kilobytes.")
    buffers: float | None = _metric(
        "The amount of memory used for buffering I/O requests prior to writing "
        "to the storage device, in kilobytes."
    )
    cached: float | None = _metric(
        "The amount of memory used for caching file system-based I/O."
    )
    dirty: float | None = _metric(
        "The amount of memory pages in RAM that have been modified but not "
        "written to their related data block in storage, in kilobytes."
    )
    free: float | None = _metric("The amount of unassigned memory, in kilobytes.")
    huge_pages_free: float | None = _metric(
        "The number of free huge pages.", "hugePagesFree"
    )
    huge_pages_rsvd: float | None = _metric(
        "The number of committed huge pages.", "hugePagesRsvd"
    )
    huge_pages_size: float | None = _metric(
        "The size for each huge pages unit, in kilobytes.", "hugePagesSize"
    )
    huge_pages_surp: float | None = _metric(
        "The number of available surplus huge pages over the total.",
        "hugePagesSurp",
    )
    huge_pages_total: float | None = _metric(
        "The total number of huge pages for the system.", "hugePagesTotal"
    )
    inactive: float | None = _metric(
        "The amount of least-frequently used memory pages, in kilobytes."
    )
    mapped: float | None = _metric(
        "The total amount of file-system contents that is memory mapped inside "
        "a process address space, in kilobytes."
    )
    page_tables: float | None = _metric(
        "The amount of memory used by page tables, in kilobytes.", "pageTables"
    )
    slab: float | None = _metric(
        "The amount of reusable kernel data structures, in kilobytes."
    )
    total: float | None = _metric("The total amount of memory, in kilobytes.")
    writeback: float | None = _metric(
        "The amount of dirty pages in RAM that are still being written to the "
        "backing storage, in kilobytes."
    )


class Network(Payload):
    interface: str = ""
    rx: float | None = _metric("The number of bytes received per second.")
    tx: float | None = _metric("The number of bytes uploaded per second.")


class Process(Payload):
    name: str = ""
    id: int = 0
    parent_id: int = Field(0, alias="parentID")
    tgid: int = 0
    cpu_used_pc: float | None = _metric(
        "The percentage of CPU used by the process.", "cpuUsedPc"
    )
    memory_used_pc: float | None = _metric(
        "The percentage of memory used by the process.", "memoryUsedPc"
    )
    rss: float | None = _metric(
        "The amount of RAM allocated to the process, in kilobytes."
    )
    vss: float | None = _metric(
        "The amount of virtual memory allocated to the process, in kilobytes."
    )
    # a number or "unlimited"
    vm_limit: Any = Field(None, alias="vmlimit")


class Swap(Payload):
    cached: float | None = _metric(
        "The amount of swap memory, in kilobytes, used as cache memory."
    )
    free: float | None = _metric("The amount of swap memory free, in kilobytes.")
    in_: float | None = _metric(
        "The amount of memory, in kilobytes, swapped in from disk.", "in"
    )
    out: float | None = _metric(
        "The amount of memory, in kilobytes, swapped out to disk."
    )
    total: float | None = _metric(
        "The total amount of swap memory available, in kilobytes."
    )


class Tasks(Payload):
    blocked: float | None = _metric("The number of tasks that are blocked.")
    running: float | None = _metric("The number of tasks that are running.")
    sleeping: float | None = _metric("The number of tasks that are sleeping.")
    stopped: float | None = _metric("The number of tasks that are stopped.")
    total: float | None = _metric("The total number of tasks.")
    zombie: float | None = _metric(
        "The number of child tasks that are inactive with an active parent task."
    )


class OSMetrics(Payload):
    """One decoded Enhanced Monitoring message."""

    engine: str = ""
    instance_id: str = Field("", alias="instanceID")
    instance_resource_id: str = Field("", alias="instanceResourceID")
    num_vcpus: int | None = _metric(
        "The number of virtual CPUs for the DB instance.", "numVCPUs"
    )
    timestamp: datetime
    uptime: str = ""
    version: float | None = None

    cpu_utilization: CPUUtilization = Field(
        default_factory=CPUUtilization, alias="cpuUtilization"
    )
    disk_io: list[DiskIO] = Field(default_factory=list, alias="diskIO")
    physical_device_io: list[DiskIO] = Field(
        default_factory=list, alias="physicalDeviceIO"
    )
    file_sys: list[FileSys] = Field(default_factory=list, alias="fileSys")
    load_average_minute: LoadAverageMinute = Field(
        default_factory=LoadAverageMinute, alias="loadAverageMinute"
    )
    memory: Memory = Field(default_factory=Memory)
    network: list[Network] = Field(default_factory=list)
    process_list: list[Process] = Field(default_factory=list, alias="processList")
    swap: Swap = Field(default_factory=Swap)
    tasks: Tasks = Field(default_factory=Tasks)

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
