"""System proxy settings on macOS, through the networksetup tool."""

from __future__ import annotations

import logging
import re
import socket
import subprocess
from collections.abc import Sequence
from enum import Enum

import psutil

from .models import Autoproxy, NetworkInterfaceError, ParseStrError, Sysproxy, SysproxyError

__all__ = [
    "ProxyType",
    "parse_field",
    "parse_service_order",
    "default_network_service",
    "default_network_service_by_ns",
    "get_system_proxy",
    "set_system_proxy",
    "get_http",
    "get_https",
    "get_socks",
    "get_bypass",
    "set_http",
    "set_https",
    "set_socks",
    "set_bypass",
    "get_auto_proxy",
    "set_auto_proxy",
]

logger = logging.getLogger(__name__)

_NETWORKSETUP = "networksetup"
_PROBE_ADDRESS = ("1.1.1.1", 80)
_MAX_PORT = 0xFFFF
_PORT_PATTERN = re.compile(r"\+?[0-9]+")


class ProxyType(Enum):
    """The proxy kinds networksetup manages, valued by their command suffix."""

    HTTP = "webproxy"
    HTTPS = "securewebproxy"
    SOCKS = "socksfirewallproxy"

    @property
    def target(self) -> str:
        """The name networksetup uses for this proxy kind."""
        return self.value


# --------------------------------------------------------------------------
# Text helpers
# --------------------------------------------------------------------------


def parse_field(text: str, key: str) -> str:
    """Return the trimmed value following the first occurrence of ``key``."""
    index = text.find(key)
    if index < 0:
        return ""
    value = text[index + len(key):]
    value, _, _ = value.partition("\n")
    return value.strip()


def _strip_double_quotes(text: str) -> str:
    inner = text[1:] if text.startswith('"') else text
    return inner[:-1] if inner.endswith('"') else text


def _parse_port(text: str) -> int:
    if _PORT_PATTERN.fullmatch(text):
        value = int(text)
        if value <= _MAX_PORT:
            return value
    raise ParseStrError("port")


def parse_service_order(text: str) -> list[tuple[str, str, str]]:
    """Parse ``-listnetworkserviceorder`` output into (service, port, device) tuples."""
    services: list[tuple[str, str, str]] = []
    pending: str | None = None

    for line in text.split("\n")[1:]:
        if not line.startswith("("):
            continue

        if pending is None:
            closing = line.find(")")
            if closing < 0:
                continue
            pending = line[closing + 1:].strip()
            continue

        body = line[1:-1]
        port_index = body.find("Port:")
        device_index = body.find(", Device:")
        if port_index < 0 or device_index < 0:
            continue
        port = body[port_index + 5:device_index].strip()
        device = body[device_index + 9:].strip()
        services.append((pending, port, device))
        pending = None

    return services


# --------------------------------------------------------------------------
# Running networksetup
# --------------------------------------------------------------------------


def _output(args: Sequence[str], label: str = "output") -> str:
    result = subprocess.run([_NETWORKSETUP, *args], stdout=subprocess.PIPE)
    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseStrError(label) from exc


def _status(args: Sequence[str]) -> None:
    subprocess.run([_NETWORKSETUP, *args])


# --------------------------------------------------------------------------
# Finding the network service
# --------------------------------------------------------------------------


def _service_for_device(device: str) -> str:
    services = parse_service_order(_output(["-listnetworkserviceorder"]))
    for service, _port, service_device in services:
        if service_device == device:
            return service
    raise NetworkInterfaceError()


def default_network_service() -> str:
    """Find the network service of the interface that carries the default route."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("0.0.0.0", 0))
        sock.connect(_PROBE_ADDRESS)
        local_ip = sock.getsockname()[0]

    try:
        interfaces = psutil.net_if_addrs()
    except (OSError, psutil.Error) as exc:
        raise NetworkInterfaceError() from exc

    for name, addresses in interfaces.items():
        if any(address.address == local_ip for address in addresses):
            return _service_for_device(name)
    raise NetworkInterfaceError()


def default_network_service_by_ns() -> str:
    """Return the first service listed by ``-listallnetworkservices``."""
    lines = _output(["-listallnetworkservices"]).split("\n")
    if len(lines) < 2:
        raise NetworkInterfaceError()
    return lines[1]


def _network_service() -> str:
    try:
        return default_network_service()
    except (SysproxyError, OSError) as exc:
        logger.debug("Failed to get network service: %r", exc)
    try:
        return default_network_service_by_ns()
    except (SysproxyError, OSError) as exc:
        logger.debug("Failed to get network service by networksetup: %r", exc)
        raise


# --------------------------------------------------------------------------
# Per-service proxies
# --------------------------------------------------------------------------


def _get_proxy(proxy_type: ProxyType, service: str) -> Sysproxy:
    text = _output([f"-get{proxy_type.target}", service])
    return Sysproxy(
        enable=parse_field(text, "Enabled:") == "Yes",
        host=parse_field(text, "Server:"),
        port=_parse_port(parse_field(text, "Port:")),
    )


def _set_proxy(proxy: Sysproxy, proxy_type: ProxyType, service: str) -> None:
    _status([f"-set{proxy_type.target}", service, proxy.host, str(proxy.port)])
    _status([f"-set{proxy_type.target}state", service, "on" if proxy.enable else "off"])


def get_http(service: str) -> Sysproxy:
    """Read the HTTP proxy of a network service."""
    return _get_proxy(ProxyType.HTTP, service)


def get_https(service: str) -> Sysproxy:
    """Read the HTTPS proxy of a network service."""
    return _get_proxy(ProxyType.HTTPS, service)


def get_socks(service: str) -> Sysproxy:
    """Read the SOCKS proxy of a network service."""
    return _get_proxy(ProxyType.SOCKS, service)


def set_http(proxy: Sysproxy, service: str) -> None:
    """Write the HTTP proxy of a network service."""
    _set_proxy(proxy, ProxyType.HTTP, service)


def set_https(proxy: Sysproxy, service: str) -> None:
    """Write the HTTPS proxy of a network service."""
    _set_proxy(proxy, ProxyType.HTTPS, service)


def set_socks(proxy: Sysproxy, service: str) -> None:
    """Write the SOCKS proxy of a network service."""
    _set_proxy(proxy, ProxyType.SOCKS, service)


def get_bypass(service: str) -> str:
    """Read the bypass domains of a network service, comma separated."""
    text = _output(["-getproxybypassdomains", service], "bypass")
    return ",".join(line for line in text.split("\n") if line)


def set_bypass(proxy: Sysproxy, service: str) -> None:
    """Write the bypass domains of a network service."""
    _status(["-setproxybypassdomains", service, *proxy.bypass.split(",")])


# --------------------------------------------------------------------------
# Manual proxy as a whole
# --------------------------------------------------------------------------


def get_system_proxy() -> Sysproxy:
    """Read the manual proxy configuration of the default network service."""
    service = _network_service()

    socks = get_socks(service)
    logger.debug("Getting SOCKS proxy: %r", socks)
    http = get_http(service)
    logger.debug("Getting HTTP proxy: %r", http)
    https = get_https(service)
    logger.debug("Getting HTTPS proxy: %r", https)
    bypass = get_bypass(service)
    logger.debug("Getting bypass domains: %r", bypass)

    socks.bypass = bypass
    if not socks.enable:
        if http.enable:
            socks.enable, socks.host, socks.port = True, http.host, http.port
        if https.enable:
            socks.enable, socks.host, socks.port = True, https.host, https.port
    return socks


def set_system_proxy(proxy: Sysproxy) -> None:
    """Apply a manual proxy configuration to the default network service."""
    service = _network_service()
    logger.debug("Use network service: %s", service)

    set_socks(proxy, service)
    set_https(proxy, service)
    set_http(proxy, service)
    set_bypass(proxy, service)


# --------------------------------------------------------------------------
# Automatic (PAC) proxy
# --------------------------------------------------------------------------


def get_auto_proxy() -> Autoproxy:
    """Read the automatic proxy configuration of the default network service."""
    service = _network_service()
    text = _output(["-getautoproxyurl", service], "auto").strip()
    first, separator, second = text.partition("\n")
    if not separator:
        raise ParseStrError("auto")
    url = first[len("URL: "):] if first.startswith("URL: ") else ""
    return Autoproxy(enable=second == "Enabled: Yes", url=_strip_double_quotes(url))


def set_auto_proxy(proxy: Autoproxy) -> None:
    """Apply an automatic proxy configuration to the default network service."""
    service = _network_service()
    url = proxy.url or '""'
    _status(["-setautoproxyurl", service, url])
    _status(["-setautoproxystate", service, "on" if proxy.enable else "off"])