"""System proxy settings on Linux desktops, through gsettings or KDE's kioslaverc."""

from __future__ import annotations

import os
import re
import subprocess
from collections.abc import Sequence
from pathlib import Path

from .models import Autoproxy, ParseStrError, SysproxyError, Sysproxy

__all__ = [
    "strip_quotes",
    "format_ignore_hosts",
    "parse_ignore_hosts",
    "get_system_proxy",
    "set_system_proxy",
    "get_enable",
    "get_bypass",
    "get_http",
    "get_https",
    "get_socks",
    "set_enable",
    "set_bypass",
    "set_http",
    "set_https",
    "set_socks",
    "get_auto_proxy",
    "set_auto_proxy",
]

CMD_KEY = "org.gnome.system.proxy"
_KDE_GROUP = "Proxy Settings"
_DEFAULT_PORT = 80
_MAX_PORT = 0xFFFF
_PORT_PATTERN = re.compile(r"\+?[0-9]+")


# --------------------------------------------------------------------------
# Text helpers
# --------------------------------------------------------------------------


def strip_quotes(text: str) -> str:
    """Remove a surrounding pair of single quotes, or a lone trailing one."""
    inner = text[1:] if text.startswith("'") else text
    return inner[:-1] if inner.endswith("'") else text


def _quote_host(host: str) -> str:
    host = host.strip()
    if not host.startswith(("'", '"')):
        host = "'" + host
    if not host.endswith(("'", '"')):
        host += "'"
    return host


def format_ignore_hosts(bypass: str) -> str:
    """Render a comma separated bypass list as a gsettings string array."""
    hosts = ", ".join(_quote_host(host) for host in bypass.split(","))
    return f"[{hosts}]"


def _join_hosts(text: str) -> str:
    return ",".join(strip_quotes(host.strip()) for host in text.split(","))


def parse_ignore_hosts(text: str) -> str:
    """Turn a gsettings string array into a comma separated bypass list."""
    text = text.strip()
    text = text.removeprefix("[")
    text = text.removesuffix("]")
    return _join_hosts(text)


def _parse_port(text: str) -> int:
    if _PORT_PATTERN.fullmatch(text):
        value = int(text)
        if value <= _MAX_PORT:
            return value
    return _DEFAULT_PORT


# --------------------------------------------------------------------------
# Running the desktop tools
# --------------------------------------------------------------------------


def _is_kde() -> bool:
    return os.environ.get("XDG_CURRENT_DESKTOP", "") == "KDE"


def _environment() -> dict[str, str] | None:
    if "APPIMAGE" not in os.environ:
        return None
    env = dict(os.environ)
    env.pop("LD_LIBRARY_PATH", None)
    return env


def _kde_tool(base: str) -> str:
    version = "6" if os.environ.get("KDE_SESSION_VERSION", "") == "6" else "5"
    return f"{base}{version}"


def _output(args: Sequence[str], label: str) -> str:
    result = subprocess.run(list(args), stdout=subprocess.PIPE, env=_environment())
    try:
        return result.stdout.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise ParseStrError(label) from exc


def _status(args: Sequence[str]) -> None:
    subprocess.run(list(args), env=_environment())


def _gsettings_get(schema: str, key: str, label: str) -> str:
    return _output(["gsettings", "get", schema, key], label)


def _gsettings_set(schema: str, key: str, value: str) -> None:
    _status(["gsettings", "set", schema, key, value])


def _kioslaverc() -> str:
    configured = os.environ.get("XDG_CONFIG_HOME", "")
    if configured and os.path.isabs(configured):
        base = Path(configured)
    else:
        try:
            base = Path.home() / ".config"
        except RuntimeError as exc:
            raise SysproxyError("failed to locate the user configuration directory") from exc
    return str(base / "kioslaverc")


def _kread(key: str, label: str) -> str:
    return _output(
        [_kde_tool("kreadconfig"), "--file", _kioslaverc(), "--group", _KDE_GROUP, "--key", key],
        label,
    )


def _kwrite(key: str, value: str) -> None:
    _status(
        [
            _kde_tool("kwriteconfig"),
            "--file",
            _kioslaverc(),
            "--group",
            _KDE_GROUP,
            "--key",
            key,
            value,
        ]
    )


# --------------------------------------------------------------------------
# Per-service proxies
# --------------------------------------------------------------------------


def _get_proxy(service: str) -> Sysproxy:
    if _is_kde():
        schema = _kread(f"{service}Proxy", "schema")
        for scheme in ("http://", "socks://"):
            while schema.startswith(scheme):
                schema = schema[len(scheme):]
        host, separator, port = schema.partition(" ")
        if not separator:
            raise ParseStrError("schema")
        return Sysproxy(host=strip_quotes(host), port=_parse_port(port))

    schema = f"{CMD_KEY}.{service}"
    host = strip_quotes(_gsettings_get(schema, "host", "host"))
    port = _parse_port(_gsettings_get(schema, "port", "port"))
    return Sysproxy(host=host, port=port)


def _set_proxy(proxy: Sysproxy, service: str) -> None:
    schema = f"{CMD_KEY}.{service}"
    port = str(proxy.port)
    _gsettings_set(schema, "host", f"'{proxy.host}'")
    _gsettings_set(schema, "port", port)

    if _is_kde():
        scheme = "socks" if service == "socks" else "http"
        _kwrite(f"{service}Proxy", f"{scheme}://{proxy.host} {port}")


def get_http() -> Sysproxy:
    """Read the HTTP proxy host and port."""
    return _get_proxy("http")


def get_https() -> Sysproxy:
    """Read the HTTPS proxy host and port."""
    return _get_proxy("https")


def get_socks() -> Sysproxy:
    """Read the SOCKS proxy host and port."""
    return _get_proxy("socks")


def set_http(proxy: Sysproxy) -> None:
    """Write the HTTP proxy host and port."""
    _set_proxy(proxy, "http")


def set_https(proxy: Sysproxy) -> None:
    """Write the HTTPS proxy host and port."""
    _set_proxy(proxy, "https")


def set_socks(proxy: Sysproxy) -> None:
    """Write the SOCKS proxy host and port."""
    _set_proxy(proxy, "socks")


# --------------------------------------------------------------------------
# Manual proxy as a whole
# --------------------------------------------------------------------------


def get_enable() -> bool:
    """Report whether the manual proxy mode is active."""
    if _is_kde():
        return _kread("ProxyType", "mode") == "1"
    return _gsettings_get(CMD_KEY, "mode", "mode") == "'manual'"


def set_enable(proxy: Sysproxy) -> None:
    """Switch the manual proxy mode on or off."""
    gnome_mode = "'manual'" if proxy.enable else "'none'"
    if _is_kde():
        _kwrite("ProxyType", "1" if proxy.enable else "0")
    _gsettings_set(CMD_KEY, "mode", gnome_mode)


def get_bypass() -> str:
    """Read the hosts that skip the proxy, comma separated."""
    if _is_kde():
        return _join_hosts(_kread("NoProxyFor", "bypass"))
    return parse_ignore_hosts(_gsettings_get(CMD_KEY, "ignore-hosts", "bypass"))


def set_bypass(proxy: Sysproxy) -> None:
    """Write the hosts that skip the proxy."""
    _gsettings_set(CMD_KEY, "ignore-hosts", format_ignore_hosts(proxy.bypass))
    if _is_kde():
        _kwrite("NoProxyFor", proxy.bypass)


def get_system_proxy() -> Sysproxy:
    """Read the current manual proxy configuration."""
    enable = get_enable()

    socks = get_socks()
    https = get_https()
    http = get_http()

    if not socks.host:
        if http.host:
            socks.host, socks.port = http.host, http.port
        if https.host:
            socks.host, socks.port = https.host, https.port

    socks.enable = enable
    try:
        socks.bypass = get_bypass()
    except (SysproxyError, OSError):
        socks.bypass = ""
    return socks


def set_system_proxy(proxy: Sysproxy) -> None:
    """Apply a manual proxy configuration."""
    set_enable(proxy)
    if proxy.enable:
        set_socks(proxy)
        set_https(proxy)
        set_http(proxy)
        set_bypass(proxy)


# --------------------------------------------------------------------------
# Automatic (PAC) proxy
# --------------------------------------------------------------------------


def get_auto_proxy() -> Autoproxy:
    """Read the current automatic proxy configuration."""
    if _is_kde():
        mode = _kread("ProxyType", "mode")
        url = _kread("Proxy Config Script", "url")
        return Autoproxy(enable=mode == "2", url=url)

    mode = _gsettings_get(CMD_KEY, "mode", "mode")
    url = strip_quotes(_gsettings_get(CMD_KEY, "autoconfig-url", "url"))
    return Autoproxy(enable=mode == "'auto'", url=url)


def set_auto_proxy(proxy: Autoproxy) -> None:
    """Apply an automatic proxy configuration."""
    if _is_kde():
        _kwrite("ProxyType", "2" if proxy.enable else "0")
        _kwrite("Proxy Config Script", proxy.url)
    _gsettings_set(CMD_KEY, "mode", "'auto'" if proxy.enable else "'none'")
    _gsettings_set(CMD_KEY, "autoconfig-url", proxy.url)