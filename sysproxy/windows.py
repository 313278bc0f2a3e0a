"""System proxy settings on Windows, kept in the user's Internet Settings registry key."""

from __future__ import annotations

import ipaddress
from typing import Any

try:
    import winreg
except ImportError:  # not running on Windows
    winreg = None  # type: ignore[assignment]

from .models import Autoproxy, NotSupportedError, ParseStrError, Sysproxy

__all__ = [
    "parse_server",
    "get_system_proxy",
    "set_system_proxy",
    "get_auto_proxy",
    "set_auto_proxy",
]

SUB_KEY = "SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Internet Settings"
_MAX_PORT = 0xFFFF

# A registry change: (value name, (registry type, data)) or (value name, None) to delete.
_Change = tuple[str, "tuple[int, Any] | None"]


def parse_server(server: str) -> tuple[str, int]:
    """Split a ``ProxyServer`` value of the form ``ip:port`` or ``[ipv6]:port``.

    An empty value gives ``("", 0)``; anything that is not an IP socket address
    raises :class:`ParseStrError`.
    """
    if not server:
        return "", 0

    if server.startswith("["):
        address, separator, port_text = server[1:].partition("]:")
        if not separator:
            raise ParseStrError(server)
        try:
            host = str(ipaddress.IPv6Address(address))
        except ValueError as exc:
            raise ParseStrError(server) from exc
    else:
        address, separator, port_text = server.rpartition(":")
        if not separator:
            raise ParseStrError(server)
        try:
            host = str(ipaddress.IPv4Address(address))
        except ValueError as exc:
            raise ParseStrError(server) from exc

    if not port_text.isascii() or not port_text.isdigit():
        raise ParseStrError(server)
    port = int(port_text)
    if port > _MAX_PORT:
        raise ParseStrError(server)
    return host, port


def _registry() -> Any:
    if winreg is None:
        raise NotSupportedError()
    return winreg


def _query(key: Any, name: str) -> tuple[Any, int] | None:
    try:
        return _registry().QueryValueEx(key, name)
    except OSError:
        return None


def _query_str(key: Any, name: str) -> str | None:
    result = _query(key, name)
    if result is not None and isinstance(result[0], str):
        return result[0]
    return None


def _apply(changes: list[_Change]) -> None:
    reg = _registry()
    with reg.CreateKeyEx(reg.HKEY_CURRENT_USER, SUB_KEY, 0, reg.KEY_WRITE) as key:
        for name, value in changes:
            if value is None:
                try:
                    reg.DeleteValue(key, name)
                except FileNotFoundError:
                    pass
            else:
                value_type, data = value
                reg.SetValueEx(key, name, 0, value_type, data)


def _unset_proxy() -> None:
    reg = _registry()
    _apply([("ProxyEnable", (reg.REG_DWORD, 0)), ("AutoConfigURL", None)])


def _set_global_proxy(server: str, bypass: str) -> None:
    reg = _registry()
    _apply(
        [
            ("ProxyEnable", (reg.REG_DWORD, 1)),
            ("ProxyServer", (reg.REG_SZ, server)),
            ("ProxyOverride", (reg.REG_SZ, bypass)),
            ("AutoConfigURL", None),
        ]
    )


def _set_auto_config(url: str) -> None:
    reg = _registry()
    _apply(
        [
            ("ProxyEnable", (reg.REG_DWORD, 0)),
            ("AutoConfigURL", (reg.REG_SZ, url)),
        ]
    )


def get_system_proxy() -> Sysproxy:
    """Read the manual proxy configuration of the current user."""
    reg = _registry()
    with reg.OpenKey(reg.HKEY_CURRENT_USER, SUB_KEY, 0, reg.KEY_READ) as key:
        enable_value = _query(key, "ProxyEnable")
        server = _query_str(key, "ProxyServer") or ""
        bypass = _query_str(key, "ProxyOverride") or ""

    enable = (
        enable_value is not None
        and enable_value[1] == reg.REG_DWORD
        and enable_value[0] == 1
    )
    host, port = parse_server(server)
    return Sysproxy(enable=enable, host=host, port=port, bypass=bypass)


def set_system_proxy(proxy: Sysproxy) -> None:
    """Apply a manual proxy configuration, or switch to a direct connection."""
    if proxy.enable:
        _set_global_proxy(f"{proxy.host}:{proxy.port}", proxy.bypass)
    else:
        _unset_proxy()


def get_auto_proxy() -> Autoproxy:
    """Read the automatic proxy configuration of the current user."""
    reg = _registry()
    with reg.OpenKey(reg.HKEY_CURRENT_USER, SUB_KEY, 0, reg.KEY_READ) as key:
        url = _query_str(key, "AutoConfigURL")
    return Autoproxy(enable=url is not None, url=url or "")


def set_auto_proxy(proxy: Autoproxy) -> None:
    """Apply an automatic proxy configuration, or switch to a direct connection."""
    if proxy.enable:
        _set_auto_config(proxy.url)
    else:
        _unset_proxy()