"""Channel mapping: which chat destinations hear about which project."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import chain
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from gitlab_irc.errors import RoutingConfigError
from gitlab_irc.schemas import ProjectIdentity

logger = logging.getLogger(__name__)

Destinations = tuple[str, ...]


def _destinations(section: str, key: str, value: Any) -> Destinations:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise RoutingConfigError(f"{section}.{key}: expected a list of channels")
    channels = tuple(str(item).strip() for item in value if str(item).strip())
    if not channels:
        raise RoutingConfigError(f"{section}.{key}: channel list is empty")
    return channels


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Destinations]:
    raw = data.get(name) or {}
    if not isinstance(raw, Mapping):
        raise RoutingConfigError(f"{name}: expected a mapping")
    return MappingProxyType(
        {str(key): _destinations(name, str(key), value) for key, value in raw.items()}
    )


@dataclass(frozen=True)
class RoutingTable:
    """
    Read-only routing table, built once at startup.

    Fields
    ------
    default : str
        Destination used when nothing more specific matches.
    groups : Mapping[str, tuple[str, ...]]
        Namespace → destinations.
    explicit : Mapping[str, tuple[str, ...]]
        'namespace/project' → destinations. Wins over ``groups``.
    """

    default: str
    groups: Mapping[str, Destinations] = field(
        default_factory=lambda: MappingProxyType({})
    )
    explicit: Mapping[str, Destinations] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self):
        if not self.default:
            raise RoutingConfigError("default: a default channel is required")
        for name in ("groups", "explicit"):
            section = getattr(self, name)
            if not isinstance(section, MappingProxyType):
                object.__setattr__(self, name, _section({name: section}, name))

    @classmethod
    def from_mapping(cls, data: Any) -> "RoutingTable":
        if not isinstance(data, Mapping):
            raise RoutingConfigError("channel mapping must be a mapping")
        default = data.get("default")
        if not isinstance(default, str) or not default.strip():
            raise RoutingConfigError("default: a default channel is required")
        return cls(
            default=default.strip(),
            groups=_section(data, "groups"),
            explicit=_section(data, "explicit"),
        )


def load_routing_table(path: str | Path) -> RoutingTable:
    """Read and validate the YAML channel mapping file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise RoutingConfigError(f"cannot read channel mapping {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RoutingConfigError(f"invalid YAML in {path}: {exc}") from exc
    table = RoutingTable.from_mapping(data)
    logger.info(
        "Loaded channel mapping from %s: %d group and %d explicit entries",
        path,
        len(table.groups),
        len(table.explicit),
    )
    return table


def resolve(identity: ProjectIdentity, table: RoutingTable) -> Destinations:
    """
    Pick the destinations for a project.

    Explicit 'namespace/name' mapping first, then the namespace's group
    mapping, then the default channel. Exact, case-sensitive matches only.
    """
    explicit = table.explicit.get(identity.full_name)
    if explicit:
        return explicit
    group = table.groups.get(identity.namespace)
    if group:
        return group
    return (table.default,)


def all_destinations(table: RoutingTable) -> list[str]:
    """Every channel named anywhere in the table, first occurrence order."""
    names: list[str] = [table.default]
    for channels in chain(table.groups.values(), table.explicit.values()):
        names.extend(channels)
    return list(dict.fromkeys(names))
