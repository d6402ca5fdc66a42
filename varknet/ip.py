"""Turn a DHCP lease into the address information for a container interface."""

from __future__ import annotations

import ipaddress
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv4Interface, IPv6Address

from varknet.lease import Lease, ProxyError

_log = logging.getLogger(__name__)


def _parse_v4(text: str) -> IPv4Address:
    try:
        return IPv4Address(text)
    except (ipaddress.AddressValueError, ValueError):
        raise ProxyError("invalid IPv4 address syntax") from None


def get_prefix_length_v4(netmask: str) -> int:
    """Return the prefix length of a dotted subnet mask by counting its ones."""
    return bin(int(_parse_v4(netmask))).count("1")


def handle_gws(gateways: Iterable[str], netmask: str) -> list[IPv4Interface]:
    """Combine each gateway address with the prefix length of ``netmask``."""
    result = []
    for route in gateways:
        prefix = get_prefix_length_v4(netmask)
        ip = _parse_v4(route)
        result.append(IPv4Interface((ip, prefix)))
    return result


@dataclass
class MacVlan:
    """Address, gateways and prefix length to apply to a container interface."""

    address: IPv4Address | IPv6Address
    interface: str
    prefix_length: int
    gateways: list[IPv4Interface] = field(default_factory=list)

    @classmethod
    def from_lease(cls, lease: Lease, interface: str) -> MacVlan:
        """Build the interface settings from an IPv4 lease."""
        _log.debug("new ipv4 macvlan for %s", interface)
        try:
            address = ipaddress.ip_address(lease.yiaddr)
        except ValueError:
            raise ProxyError("bad address: invalid IP address syntax") from None
        try:
            gateways = handle_gws(lease.gateways, lease.subnet_mask)
        except ProxyError as error:
            raise ProxyError(f"bad gateways: {error}") from None
        prefix_length = get_prefix_length_v4(lease.subnet_mask)
        return cls(
            address=address,
            interface=interface,
            prefix_length=prefix_length,
            gateways=gateways,
        )