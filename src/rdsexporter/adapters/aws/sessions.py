"""AWS sessions for the configured instances.

Instances that share a region and credentials share one aioboto3 session
and one set of clients, so a single log query can cover all of them.
"""

import logging
from collections.abc import Callable
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from rdsexporter.adapters.aws.instrumentation import RequestMetrics
from rdsexporter.config import Config, InstanceConfig
from rdsexporter.core.models import MonitoredInstance

logger = logging.getLogger(__name__)


@dataclass
class SessionGroup:
    """Configured instances reachable with one region/credentials pair."""

    region: str
    aws_access_key: str | None = None
    aws_secret_key: str | None = None
    instances: list[InstanceConfig] = field(default_factory=list)

    def session_kwargs(self) -> dict[str, str]:
        """Build kwargs for ``aioboto3.Session``."""
        kwargs = {"region_name": self.region}
        if self.aws_access_key:
            kwargs["aws_access_key_id"] = self.aws_access_key
        if self.aws_secret_key:
            kwargs["aws_secret_access_key"] = self.aws_secret_key
        return kwargs


@dataclass
class ConnectedSession:
    """Open clients of one session group and its resolved instances."""

    region: str
    instances: list[MonitoredInstance]
    logs: Any
    cloudwatch: Any


def group_instances(config: Config) -> list[SessionGroup]:
    """Group instances by region and credentials, in configuration order."""
    groups: dict[tuple[str, str | None, str | None], SessionGroup] = {}
    for instance in config.instances:
        key = (instance.region, instance.aws_access_key, instance.aws_secret_key)
        if key not in groups:
            groups[key] = SessionGroup(*key)
        groups[key].instances.append(instance)
    return list(groups.values())


def _monitored(config: InstanceConfig, resource_id: str) -> MonitoredInstance:
    return MonitoredInstance(
        resource_id=resource_id,
        instance=config.instance,
        region=config.region,
        labels=tuple(sorted(config.labels.items())),
        disable_enhanced_metrics=config.disable_enhanced_metrics,
        disable_basic_metrics=config.disable_basic_metrics,
    )


async def resolve_instances(rds: Any, group: SessionGroup) -> list[MonitoredInstance]:
    """Look up the ``DbiResourceId`` of instances that don't configure one.

    Instances whose lookup fails are logged and left out.
    """
    resolved = []
    for config in group.instances:
        if config.resource_id:
            resolved.append(_monitored(config, config.resource_id))
            continue

        context = {"instance": config.instance, "region": config.region}
        try:
            response = await rds.describe_db_instances(
                DBInstanceIdentifier=config.instance
            )
        except (BotoCoreError, ClientError):
            logger.exception("Failed to describe DB instance", extra=context)
            continue

        db_instances = response.get("DBInstances", [])
        if not db_instances:
            logger.error("DB instance not found", extra=context)
            continue
        described = db_instances[0]
        if not config.disable_enhanced_metrics and not described.get(
            "EnhancedMonitoringResourceArn"
        ):
            logger.warning(
                "Enhanced Monitoring is not enabled for %s",
                config.instance,
                extra=context,
            )
        resolved.append(_monitored(config, described["DbiResourceId"]))
    return resolved


async def build_sessions(
    config: Config,
    stack: AsyncExitStack,
    request_metrics: RequestMetrics | None = None,
    session_factory: Callable[..., Any] = aioboto3.Session,
) -> list[ConnectedSession]:
    """Open the clients of every session group.

    The ``logs`` and ``cloudwatch`` clients stay open until ``stack`` is
    closed; the ``rds`` client is only used during start-up.

    Args:
        config: Parsed configuration.
        stack: Owns the lifetime of the opened clients.
        request_metrics: Instruments every client when given.
        session_factory: Creates a session from ``SessionGroup.session_kwargs``.
    """

    def instrument(client: Any) -> Any:
        if request_metrics is not None:
            request_metrics.instrument(client)
        return client

    sessions = []
    for group in group_instances(config):
        session = session_factory(**group.session_kwargs())
        async with session.client("rds") as rds:
            instances = await resolve_instances(instrument(rds), group)
        if not instances:
            logger.warning("No instances to monitor", extra={"region": group.region})
            continue

        logs = await stack.enter_async_context(session.client("logs"))
        cloudwatch = await stack.enter_async_context(session.client("cloudwatch"))
        sessions.append(
            ConnectedSession(
                region=group.region,
                instances=instances,
                logs=instrument(logs),
                cloudwatch=instrument(cloudwatch),
            )
        )
        logger.info(
            "Monitoring %d instance(s)",
            len(instances),
            extra={"region": group.region},
        )
    return sessions
