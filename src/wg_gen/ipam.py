# src/wg_gen/ipam.py
from __future__ import annotations
import ipaddress
import logging
import re
from typing import Iterable, Tuple

from .errors import (
    AddressInUse,
    AddressOutsideNetwork,
    AddressPoolExhausted,
    InvalidClientAddress,
    InvalidInterfaceName,
    InvalidNetworkFormat,
)

logger = logging.getLogger(__name__)

# noms d'interface Linux (IFNAMSIZ - 1)
_IFACE_RE = re.compile(r"^[A-Za-z0-9_.:@-]{1,15}$")


def parse_network(network: str) -> ipaddress.IPv4Interface:
    """
    Parse 'A.B.C.D/N'. The address is kept as written (not masked), it is
    the base from which the server and client addresses are counted.
    """
    parts = network.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1].isdigit():
        raise InvalidNetworkFormat(
            f"Invalid network format '{network}'. "
            "Expected CIDR notation (e.g., 10.0.0.0/24)"
        )
    try:
        return ipaddress.IPv4Interface(network)
    except ValueError as exc:
        raise InvalidNetworkFormat(f"Invalid IPv4 network '{network}': {exc}") from exc


def validate_interface_name(name: str) -> str:
    if not _IFACE_RE.match(name):
        raise InvalidInterfaceName(f"Invalid network interface name: {name!r}")
    return name


def _is_usable(ip: ipaddress.IPv4Address, net: ipaddress.IPv4Network) -> bool:
    # /31 et /32 n'ont pas d'adresse de broadcast
    return ip in net and (net.num_addresses <= 2 or ip != net.broadcast_address)


def server_ip(network: str) -> ipaddress.IPv4Address:
    """
    base+1, which must be a usable host of the network.
    """
    iface = parse_network(network)
    try:
        ip = iface.ip + 1
    except ipaddress.AddressValueError as exc:
        raise InvalidNetworkFormat(f"No room for the server address in {network}") from exc
    if not _is_usable(ip, iface.network):
        raise InvalidNetworkFormat(f"Server address {ip} is not a usable host of {network}")
    return ip


def server_address(network: str) -> str:
    """
    Adresse du serveur avec le prefixe d'origine, ex '10.0.0.1/24'.
    """
    return f"{server_ip(network)}/{parse_network(network).network.prefixlen}"


def allocate_address(network: str, offset: int, used: Iterable[str] = ()) -> Tuple[str, int]:
    """
    Retourne (adresse, prochain offset). Starts at base + offset and skips
    addresses already held by explicitly assigned clients. Skipped offsets
    are consumed as well, nothing below the returned counter is handed out
    again.
    """
    iface = parse_network(network)
    taken = {ipaddress.IPv4Address(u) for u in used}

    while True:
        try:
            candidate = iface.ip + offset
        except ipaddress.AddressValueError as exc:
            raise AddressPoolExhausted(f"No free IP available in VPN network {network}") from exc
        if not _is_usable(candidate, iface.network):
            raise AddressPoolExhausted(f"No free IP available in VPN network {network}")
        if candidate not in taken:
            break
        logger.debug("Skipping %s, already assigned", candidate)
        offset += 1

    logger.debug("Allocated %s (offset %d) in %s", candidate, offset, network)
    return str(candidate), offset + 1


def validate_explicit_address(network: str, address: str, used: Iterable[str]) -> str:
    """
    An explicitly requested client address must be a host of the server
    network other than the server itself, and must not already be assigned
    to a client.
    """
    try:
        ip = ipaddress.IPv4Address(address)
    except ValueError as exc:
        raise InvalidClientAddress(f"Invalid IPv4 address: {address!r}") from exc

    net = parse_network(network).network
    if ip not in net:
        raise AddressOutsideNetwork(f"Address {ip} is outside of network {network}")

    if net.num_addresses > 2 and ip in (net.network_address, net.broadcast_address):
        raise InvalidClientAddress(f"Address {ip} is not a usable host of {network}")

    if ip == server_ip(network):
        raise AddressInUse(f"Address {ip} is the server address")

    if any(ipaddress.IPv4Address(u) == ip for u in used):
        raise AddressInUse(f"Address {ip} is already assigned to a client")

    return str(ip)
