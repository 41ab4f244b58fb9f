"""Catalog of CloudWatch RDS metrics exported by the basic feed."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogMetric:
    """Mapping of one CloudWatch metric to its exported name.

    Attributes:
        cloudwatch_name: Metric name in the AWS/RDS namespace.
        name: Exported metric name.
        help: Help text of the exported metric.
    """

    cloudwatch_name: str
    name: str
    help: str


METRICS: tuple[CatalogMetric, ...] = (
    CatalogMetric(
        "ActiveTransactions",
        "aws_rds_active_transactions_average",
        "ActiveTransactions",
    ),
    CatalogMetric(
        "AuroraBinlogReplicaLag",
        "aws_rds_aurora_binlog_replica_lag_average",
        "AuroraBinlogReplicaLag",
    ),
    CatalogMetric(
        "AuroraReplicaLag",
        "aws_rds_aurora_replica_lag_average",
        "AuroraReplicaLag",
    ),
    CatalogMetric(
        "AuroraReplicaLagMaximum",
        "aws_rds_aurora_replica_lag_maximum_average",
        "AuroraReplicaLagMaximum",
    ),
    CatalogMetric(
        "AuroraReplicaLagMinimum",
        "aws_rds_aurora_replica_lag_minimum_average",
        "AuroraReplicaLagMinimum",
    ),
    CatalogMetric(
        "BinLogDiskUsage",
        "aws_rds_bin_log_disk_usage_average",
        "The amount of disk space occupied by binary logs on the master. Applies to MySQL read replicas. Units: Bytes",
    ),
    CatalogMetric(
        "BlockedTransactions",
        "aws_rds_blocked_transactions_average",
        "BlockedTransactions",
    ),
    CatalogMetric(
        "BufferCacheHitRatio",
        "aws_rds_buffer_cache_hit_ratio_average",
        "BufferCacheHitRatio",
    ),
    CatalogMetric(
        "BurstBalance",
        "aws_rds_burst_balance_average",
        "The percent of General Purpose SSD (gp2) burst-bucket I/O credits available. Units: Percent",
    ),
    CatalogMetric(
        "CPUCreditBalance",
        "aws_rds_cpu_credit_balance_average",
        "[T2 instances] The number of CPU credits available for the instance to burst beyond its base CPU utilization. Credits are stored in the credit balance after they are earned and removed from the credit balance after they expire. Credits expire 24 hours after they are earned. CPU credit metrics are available only at a 5 minute frequency. Units: Count",
    ),
    CatalogMetric(
        "CPUCreditUsage",
        "aws_rds_cpu_credit_usage_average",
        "[T2 instances] The number of CPU credits consumed by the instance. One CPU credit equals one vCPU running at 100% utilization for one minute or an equivalent combination of vCPUs, utilization, and time (for example, one vCPU running at 50% utilization for two minutes or two vCPUs running at 25% utilization for two minutes). CPU credit metrics are available only at a 5 minute frequency. If you specify a period greater than five minutes, use the Sum statistic instead of the Average statistic. Units: Count",
    ),
    CatalogMetric(
        "CPUUtilization",
        "node_cpu_average",
        "The percentage of CPU utilization. Units: Percent",
    ),
    CatalogMetric(
        "CommitLatency",
        "aws_rds_commit_latency_average",
        "CommitLatency",
    ),
    CatalogMetric(
        "CommitThroughput",
        "aws_rds_commit_throughput_average",
        "CommitThroughput",
    ),
    CatalogMetric(
        "DDLLatency",
        "aws_rds_ddl_latency_average",
        "DDLLatency",
    ),
    CatalogMetric(
        "DDLThroughput",
        "aws_rds_ddl_throughput_average",
        "DDLThroughput",
    ),
    CatalogMetric(
        "DMLLatency",
        "aws_rds_dml_latency_average",
        "DMLLatency",
    ),
    CatalogMetric(
        "DMLThroughput",
        "aws_rds_dml_throughput_average",
        "DMLThroughput",
    ),
    CatalogMetric(
        "DatabaseConnections",
        "aws_rds_database_connections_average",
        "The number of database connections in use. Units: Count",
    ),
    CatalogMetric(
        "Deadlocks",
        "aws_rds_deadlocks_average",
        "Deadlocks",
    ),
    CatalogMetric(
        "DeleteLatency",
        "aws_rds_delete_latency_average",
        "DeleteLatency",
    ),
    CatalogMetric(
        "DeleteThroughput",
        "aws_rds_delete_throughput_average",
        "DeleteThroughput",
    ),
    CatalogMetric(
        "DiskQueueDepth",
        "aws_rds_disk_queue_depth_average",
        "The number of outstanding IOs (read/write requests) waiting to access the disk. Units: Count",
    ),
    CatalogMetric(
        "EngineUptime",
        "node_boot_time_seconds",
        "EngineUptime",
    ),
    CatalogMetric(
        "FreeLocalStorage",
        "aws_rds_free_local_storage_average",
        "FreeLocalStorage",
    ),
    CatalogMetric(
        "FreeStorageSpace",
        "node_filesystem_free_bytes",
        "The amount of available storage space. Units: Bytes",
    ),
    CatalogMetric(
        "FreeableMemory",
        "node_memory_Cached_bytes",
        "The amount of available random access memory. Units: Bytes",
    ),
    CatalogMetric(
        "InsertLatency",
        "aws_rds_insert_latency_average",
        "InsertLatency",
    ),
    CatalogMetric(
        "InsertThroughput",
        "aws_rds_insert_throughput_average",
        "InsertThroughput",
    ),
    CatalogMetric(
        "LoginFailures",
        "aws_rds_login_failures_average",
        "LoginFailures",
    ),
    CatalogMetric(
        "NetworkReceiveThroughput",
        "aws_rds_network_receive_throughput_average",
        "The incoming (Receive) network traffic on the DB instance, including both customer database traffic and Amazon RDS traffic used for monitoring and replication. Units: Bytes/second",
    ),
    CatalogMetric(
        "NetworkThroughput",
        "aws_rds_network_throughput_average",
        "NetworkThroughput",
    ),
    CatalogMetric(
        "NetworkTransmitThroughput",
        "aws_rds_network_transmit_throughput_average",
        "The outgoing (Transmit) network traffic on the DB instance, including both customer database traffic and Amazon RDS traffic used for monitoring and replication. Units: Bytes/second",
    ),
    CatalogMetric(
        "Queries",
        "aws_rds_queries_average",
        "Queries",
    ),
    CatalogMetric(
        "ReadIOPS",
        "aws_rds_read_iops_average",
        "The average number of disk I/O operations per second. Units: Count/Second",
    ),
    CatalogMetric(
        "ReadLatency",
        "aws_rds_read_latency_average",
        "The average amount of time taken per disk I/O operation. Units: Seconds",
    ),
    CatalogMetric(
        "ReadThroughput",
        "aws_rds_read_throughput_average",
        "The average number of bytes read from disk per second. Units: Bytes/Second",
    ),
    CatalogMetric(
        "ResultSetCacheHitRatio",
        "aws_rds_result_set_cache_hit_ratio_average",
        "ResultSetCacheHitRatio",
    ),
    CatalogMetric(
        "SelectLatency",
        "aws_rds_select_latency_average",
        "SelectLatency",
    ),
    CatalogMetric(
        "SelectThroughput",
        "aws_rds_select_throughput_average",
        "SelectThroughput",
    ),
    CatalogMetric(
        "SwapUsage",
        "aws_rds_swap_usage_average",
        "The amount of swap space used on the DB instance. Units: Bytes",
    ),
    CatalogMetric(
        "UpdateLatency",
        "aws_rds_update_latency_average",
        "UpdateLatency",
    ),
    CatalogMetric(
        "UpdateThroughput",
        "aws_rds_update_throughput_average",
        "UpdateThroughput",
    ),
    CatalogMetric(
        "VolumeBytesUsed",
        "aws_rds_volume_bytes_used_average",
        "VolumeBytesUsed",
    ),
    CatalogMetric(
        "VolumeReadIOPs",
        "aws_rds_volume_read_io_ps_average",
        "VolumeReadIOPs",
    ),
    CatalogMetric(
        "VolumeWriteIOPs",
        "aws_rds_volume_write_io_ps_average",
        "VolumeWriteIOPs",
    ),
    CatalogMetric(
        "WriteIOPS",
        "aws_rds_write_iops_average",
        "The average number of disk I/O operations per second. Units: Count/Second",
    ),
    CatalogMetric(
        "WriteLatency",
        "aws_rds_write_latency_average",
        "The average amount of time taken per disk I/O operation. Units: Seconds",
    ),
    CatalogMetric(
        "WriteThroughput",
        "aws_rds_write_throughput_average",
        "The average number of bytes written to disk per second. Units: Bytes/Second",
    ),
    CatalogMetric(
        "ReplicaLag",
        "aws_rds_replica_lag",
        "The amount of time a read replica DB instance lags behind the source DB instance. Unit: Seconds",
    ),
)
