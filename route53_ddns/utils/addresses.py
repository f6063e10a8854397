"""IP address and hostname helpers."""

import ipaddress
from typing import Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_address(value: Optional[str]) -> Optional[IPAddress]:
    """
    Parse an IPv4 or IPv6 literal.

    Args:
        value: Candidate address string

    Returns:
        The parsed address, or None if value is not a valid literal
    """
    if not value:
        return None
    try:
        return ipaddress.ip_address(value.strip())
    except ValueError:
        return None


def record_type_for(address: IPAddress) -> str:
    """Return the DNS record type (A or AAAA) for an address family."""
    return "AAAA" if address.version == 6 else "A"


def same_address(first: str, second: str) -> bool:
    """
    Compare two addresses, tolerating different textual forms.

    Two strings that both parse are compared as addresses
    (``2001:DB8::1`` equals ``2001:db8:0::1``); otherwise the raw strings
    are compared.
    """
    parsed_first = parse_address(first)
    parsed_second = parse_address(second)
    if parsed_first is not None and parsed_second is not None:
        return parsed_first == parsed_second
    return first == second


def normalize_hostname(hostname: Optional[str]) -> str:
    """Trim, lower-case and strip the trailing dot from a hostname."""
    if not hostname:
        return ""
    return hostname.strip().rstrip(".").lower()


def hostname_in_zone(hostname: str, zone_name: str) -> bool:
    """Return True if hostname is the zone apex or lies below it."""
    host = normalize_hostname(hostname)
    zone = normalize_hostname(zone_name)
    return host == zone or host.endswith("." + zone)
