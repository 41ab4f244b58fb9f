"""Configuration file loading.

The configuration file lists the monitored instances::

    instances:
      - instance: rds-mysql57
        region: us-east-1
        aws_access_key: AKIA...
        aws_secret_key: ...
        disable_basic_metrics: false
        disable_enhanced_metrics: false
        labels:
          env: production

Instances without explicit credentials use the default AWS credential chain.
``resource_id`` (the ``DbiResourceId``) is looked up through the RDS API when
it is not given.
"""

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

_LABEL_NAME = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_RESERVED_LABELS = frozenset({"instance", "region"})


class ConfigError(ValueError):
    """Raised when the configuration file is missing or invalid."""


@dataclass(frozen=True)
class InstanceConfig:
    """One ``instances`` entry of the configuration file."""

    instance: str
    region: str
    resource_id: str | None = None
    aws_access_key: str | None = None
    aws_secret_key: str | None = None
    disable_basic_metrics: bool = False
    disable_enhanced_metrics: bool = False
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Config:
    """Parsed configuration file."""

    instances: tuple[InstanceConfig, ...]


_INSTANCE_KEYS = frozenset(f.name for f in fields(InstanceConfig))
_STRING_KEYS = ("resource_id", "aws_access_key", "aws_secret_key")
_BOOL_KEYS = ("disable_basic_metrics", "disable_enhanced_metrics")


def _parse_labels(where: str, raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: labels must be a mapping")
    labels = {}
    for name, value in raw.items():
        if not isinstance(name, str) or not _LABEL_NAME.match(name):
            raise ConfigError(f"{where}: invalid label name {name!r}")
        if name in _RESERVED_LABELS:
            raise ConfigError(f"{where}: label {name!r} is set by the exporter")
        labels[name] = str(value)
    return labels


def _parse_instance(index: int, raw: Any) -> InstanceConfig:
    where = f"instances[{index}]"
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: expected a mapping")

    unknown = sorted(set(raw) - _INSTANCE_KEYS)
    if unknown:
        raise ConfigError(f"{where}: unknown keys: {', '.join(map(str, unknown))}")

    for key in ("instance", "region"):
        if not isinstance(raw.get(key), str) or not raw[key]:
            raise ConfigError(f"{where}: {key!r} is required")
    for key in _STRING_KEYS:
        if raw.get(key) is not None and not isinstance(raw[key], str):
            raise ConfigError(f"{where}: {key!r} must be a string")
    for key in _BOOL_KEYS:
        if not isinstance(raw.get(key, False), bool):
            raise ConfigError(f"{where}: {key!r} must be true or false")
    if bool(raw.get("aws_access_key")) != bool(raw.get("aws_secret_key")):
        raise ConfigError(
            f"{where}: aws_access_key and aws_secret_key must be set together"
        )

    return InstanceConfig(
        instance=raw["instance"],
        region=raw["region"],
        resource_id=raw.get("resource_id"),
        aws_access_key=raw.get("aws_access_key"),
        aws_secret_key=raw.get("aws_secret_key"),
        disable_basic_metrics=raw.get("disable_basic_metrics", False),
        disable_enhanced_metrics=raw.get("disable_enhanced_metrics", False),
        labels=_parse_labels(where, raw.get("labels")),
    )


def parse_config(data: Any) -> Config:
    """Validate the decoded YAML document.

    Raises:
        ConfigError: If the document does not describe a valid configuration.
    """
    if not isinstance(data, dict) or not isinstance(data.get("instances"), list):
        raise ConfigError("configuration must contain an 'instances' list")
    instances = tuple(
        _parse_instance(index, raw) for index, raw in enumerate(data["instances"])
    )
    if not instances:
        raise ConfigError("no instances configured")

    seen: set[tuple[str, str]] = set()
    for instance in instances:
        key = (instance.region, instance.instance)
        if key in seen:
            raise ConfigError(
                f"instance {instance.instance!r} in {instance.region} "
                "is configured twice"
            )
        seen.add(key)
    return Config(instances=instances)


def load_config(path: str | Path) -> Config:
    """Read and validate a YAML configuration file.

    Raises:
        ConfigError: If the file can't be read or is invalid.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"can't read configuration file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return parse_config(data)
