"""Lease and network configuration records exchanged with the DHCP proxy."""

from __future__ import annotations

import dataclasses
import ipaddress
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address
from os import PathLike
from typing import Any, TypeVar

_INVALID_V4 = "invalid IPv4 address syntax"
_INVALID_V6 = "invalid IPv6 address syntax"

_T = TypeVar("_T")


class ProxyError(Exception):
    """Error raised by the DHCP proxy helpers."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


def _default_of(f: dataclasses.Field) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    return f.default_factory()  # type: ignore[misc]


def _check_value(name: str, value: Any, expected: Any) -> Any:
    kind = type(expected)
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ProxyError(f"invalid type for field `{name}`: expected integer")
        return value
    if kind is bool:
        if not isinstance(value, bool):
            raise ProxyError(f"invalid type for field `{name}`: expected boolean")
        return value
    if kind is str:
        if not isinstance(value, str):
            raise ProxyError(f"invalid type for field `{name}`: expected string")
        return value
    if kind is list:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ProxyError(
                f"invalid type for field `{name}`: expected a list of strings"
            )
        return list(value)
    return value


def _from_mapping(cls: type[_T], data: Mapping[str, Any]) -> _T:
    if not isinstance(data, Mapping):
        raise ProxyError(f"invalid type: expected an object for {cls.__name__}")
    values = {}
    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if f.name not in data:
            raise ProxyError(f"missing field `{f.name}`")
        values[f.name] = _check_value(f.name, data[f.name], _default_of(f))
    return cls(**values)


@dataclass
class Lease:
    """A DHCP lease as handed out by the proxy."""

    t1: int = 0
    t2: int = 0
    lease_time: int = 0
    mtu: int = 0
    domain_name: str = ""
    mac_address: str = ""
    is_v6: bool = False
    siaddr: str = ""
    yiaddr: str = ""
    srv_id: str = ""
    subnet_mask: str = ""
    broadcast_addr: str = ""
    dns_servers: list[str] = field(default_factory=list)
    gateways: list[str] = field(default_factory=list)
    ntp_servers: list[str] = field(default_factory=list)
    host_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the lease as a JSON-ready dictionary."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Lease:
        """Build a lease from a dictionary; every field must be present."""
        return _from_mapping(cls, data)


@dataclass
class NetworkConfig:
    """The request a client sends to the proxy for one container interface."""

    host_iface: str = ""
    container_mac_addr: str = ""
    domain_name: str = ""
    host_name: str = ""
    version: int = 0
    ns_path: str = ""
    container_iface: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the configuration as a JSON-ready dictionary."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkConfig:
        """Build a configuration from a dictionary; every field must be present."""
        return _from_mapping(cls, data)

    @classmethod
    def load(cls, path: str | PathLike[str]) -> NetworkConfig:
        """Read a JSON network configuration from ``path``."""
        with open(path, encoding="utf-8") as handle:
            return cls.from_dict(json.load(handle))


def handle_ip_vectors(ips: Iterable[IPv4Address] | None) -> list[str]:
    """Render an optional sequence of addresses as strings."""
    if ips is None:
        return []
    return [str(ip) for ip in ips]


def to_v4_addrs(values: Iterable[str]) -> list[IPv4Address] | None:
    """Parse IPv4 address strings; an empty input gives None."""
    values = list(values)
    if not values:
        return None
    try:
        return [IPv4Address(value) for value in values]
    except (ipaddress.AddressValueError, ValueError):
        raise ProxyError(_INVALID_V4) from None


def to_v6_addrs(values: Iterable[str]) -> list[IPv6Address] | None:
    """Parse IPv6 address strings; an empty input gives None."""
    values = list(values)
    if not values:
        return None
    try:
        return [IPv6Address(value) for value in values]
    except (ipaddress.AddressValueError, ValueError):
        raise ProxyError(_INVALID_V6) from None