"""Data models for the parts of the Docker Engine API the deployer reads."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_U8 = (0, 255)
_U16 = (0, 65535)


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _lookup(data: Mapping[str, Any], names: tuple[str, ...], optional: bool) -> Any:
    for name in names:
        if name in data:
            value = data[name]
            break
    else:
        if optional:
            return None
        raise ValueError(f"missing field `{names[0]}`")
    if value is None and not optional:
        raise ValueError(f"field `{names[0]}` must not be null")
    return value


def _str(data: Mapping[str, Any], *names: str, optional: bool = False) -> str | None:
    value = _lookup(data, names, optional)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field `{names[0]}` must be a string")
    return value


def _int(
    data: Mapping[str, Any],
    *names: str,
    bounds: tuple[int, int] | None = None,
    optional: bool = False,
) -> int | None:
    value = _lookup(data, names, optional)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field `{names[0]}` must be an integer")
    if bounds is not None and not bounds[0] <= value <= bounds[1]:
        raise ValueError(f"field `{names[0]}` out of range: {value}")
    return value


def _bool(data: Mapping[str, Any], *names: str) -> bool:
    value = _lookup(data, names, False)
    if not isinstance(value, bool):
        raise ValueError(f"field `{names[0]}` must be a boolean")
    return value


def _str_list(
    data: Mapping[str, Any], *names: str, optional: bool = False
) -> list[str] | None:
    value = _lookup(data, names, optional)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"field `{names[0]}` must be a list of strings")
    return list(value)


def _str_map(
    data: Mapping[str, Any], *names: str, optional: bool = False
) -> dict[str, str] | None:
    value = _lookup(data, names, optional)
    if value is None:
        return None
    if not isinstance(value, Mapping) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    ):
        raise ValueError(f"field `{names[0]}` must be a map of strings")
    return dict(value)


def _list(data: Mapping[str, Any], name: str) -> list[Any]:
    value = _lookup(data, (name,), False)
    if not isinstance(value, list):
        raise ValueError(f"field `{name}` must be a list")
    return value


@dataclass
class Image:
    """An image as listed by the Docker API."""

    containers: int
    created: int
    id: str
    labels: dict[str, str] | None
    parent_id: str
    repo_digests: list[str]
    repo_tags: list[str]
    shared_size: int
    size: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Image:
        data = _require_mapping(data, "Image")
        return cls(
            containers=_int(data, "Containers"),
            created=_int(data, "Created"),
            id=_str(data, "Id"),
            labels=_str_map(data, "Labels", optional=True),
            parent_id=_str(data, "ParentId"),
            repo_digests=_str_list(data, "RepoDigests"),
            repo_tags=_str_list(data, "RepoTags"),
            shared_size=_int(data, "SharedSize"),
            size=_int(data, "Size"),
        )


@dataclass
class Port:
    """A port published by a container."""

    ip: str | None
    private_port: int
    public_port: int | None
    port_type: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Port:
        data = _require_mapping(data, "Port")
        return cls(
            ip=_str(data, "IP", optional=True),
            private_port=_int(data, "PrivatePort", bounds=_U16),
            public_port=_int(data, "PublicPort", bounds=_U16, optional=True),
            port_type=_str(data, "Type"),
        )


@dataclass
class HostConfig:
    """The host configuration summary of a container."""

    network_mode: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HostConfig:
        data = _require_mapping(data, "HostConfig")
        return cls(network_mode=_str(data, "NetworkMode"))


@dataclass
class Network:
    """A container's attachment to one network."""

    ipam_config: Any
    links: list[str] | None
    aliases: list[str] | None
    network_id: str
    endpoint_id: str
    gateway: str
    ip_address: str
    ip_prefix_len: int
    ipv6_gateway: str
    global_ipv6_address: str
    global_ipv6_prefix_len: int
    mac_address: str
    driver_opts: dict[str, str] | None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Network:
        data = _require_mapping(data, "Network")
        return cls(
            ipam_config=_lookup(data, ("IPAMConfig",), True),
            links=_str_list(data, "Links", optional=True),
            aliases=_str_list(data, "Aliases", optional=True),
            network_id=_str(data, "NetworkID"),
            endpoint_id=_str(data, "EndpointID"),
            gateway=_str(data, "Gateway"),
            ip_address=_str(data, "IPAddress"),
            ip_prefix_len=_int(data, "IPPrefixLen", bounds=_U8),
            ipv6_gateway=_str(data, "IPv6Gateway"),
            global_ipv6_address=_str(data, "GlobalIPv6Address"),
            global_ipv6_prefix_len=_int(data, "GlobalIPv6PrefixLen", bounds=_U8),
            mac_address=_str(data, "MacAddress"),
            driver_opts=_str_map(data, "DriverOpts", optional=True),
        )


@dataclass
class NetworkSettings:
    """The networks a container is attached to, by name."""

    networks: dict[str, Network]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkSettings:
        data = _require_mapping(data, "NetworkSettings")
        raw = _require_mapping(_lookup(data, ("Networks",), False), "Networks")
        return cls(networks={name: Network.from_dict(net) for name, net in raw.items()})


@dataclass
class Mount:
    """A mount inside a container."""

    target: str
    source: str
    mount_type: str
    mode: str
    rw: bool
    propagation: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Mount:
        data = _require_mapping(data, "Mount")
        return cls(
            target=_str(data, "Destination", "Target", "target"),
            source=_str(data, "Source", "source"),
            mount_type=_str(data, "Type", "type"),
            mode=_str(data, "Mode", "mode"),
            rw=_bool(data, "RW", "rw"),
            propagation=_str(data, "Propagation", "propagation"),
        )


@dataclass
class Container:
    """A container as listed by the Docker API."""

    id: str
    names: list[str]
    image: str
    image_id: str
    command: str
    created: int
    ports: list[Port]
    labels: dict[str, str] | None
    state: str
    status: str
    host_config: HostConfig
    network_settings: NetworkSettings
    mounts: list[Mount]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Container:
        data = _require_mapping(data, "Container")
        return cls(
            id=_str(data, "Id"),
            names=_str_list(data, "Names"),
            image=_str(data, "Image"),
            image_id=_str(data, "ImageID"),
            command=_str(data, "Command"),
            created=_int(data, "Created"),
            ports=[Port.from_dict(p) for p in _list(data, "Ports")],
            labels=_str_map(data, "Labels", optional=True),
            state=_str(data, "State"),
            status=_str(data, "Status"),
            host_config=HostConfig.from_dict(_lookup(data, ("HostConfig",), False)),
            network_settings=NetworkSettings.from_dict(
                _lookup(data, ("NetworkSettings",), False)
            ),
            mounts=[Mount.from_dict(m) for m in _list(data, "Mounts")],
        )