"""Helpers for converting address ranges into proxy bypass patterns."""

from __future__ import annotations

import ipaddress

from .models import ParseStrError

__all__ = ["ipv4_cidr_to_wildcard"]


def ipv4_cidr_to_wildcard(cidr: str) -> list[str]:
    """Convert an IPv4 CIDR block into a list of wildcard host patterns.

    >>> ipv4_cidr_to_wildcard("127.0.0.1/8")
    ['127.*']
    """
    try:
        network = ipaddress.IPv4Network(cidr, strict=False)
    except ValueError as exc:
        raise ParseStrError(cidr) from exc

    start = str(network.network_address).split(".")
    end = str(network.broadcast_address).split(".")
    last = len(start) - 1

    prefix = ""
    for position, (low, high) in enumerate(zip(start, end)):
        if low == high:
            prefix += low if position == last else f"{low}."
            continue
        if low == "0" and high == "255":
            return [prefix + "*"]
        suffix = "" if position == last else ".*"
        return [f"{prefix}{octet}{suffix}" for octet in range(int(low), int(high) + 1)]
    return []