"""Proxy settings records and the errors raised while reading or writing them."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = [
    "Sysproxy",
    "Autoproxy",
    "SysproxyError",
    "ParseStrError",
    "NetworkInterfaceError",
    "NotSupportedError",
]

_MAX_PORT = 0xFFFF


@dataclass
class Sysproxy:
    """A manual (host and port) system proxy configuration."""

    enable: bool = False
    host: str = ""
    port: int = 0
    bypass: str = ""

    def __post_init__(self) -> None:
        if not 0 <= self.port <= _MAX_PORT:
            raise ValueError(f"port out of range: {self.port}")


@dataclass
class Autoproxy:
    """An automatic (PAC URL) system proxy configuration."""

    enable: bool = False
    url: str = ""


class SysproxyError(Exception):
    """Base class for every error raised by this package."""


class ParseStrError(SysproxyError):
    """A string read from the system could not be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(f"failed to parse string `{value}`")
        self.value = value


class NetworkInterfaceError(SysproxyError):
    """The default network interface could not be determined."""

    def __init__(self) -> None:
        super().__init__("failed to get default network interface")


class NotSupportedError(SysproxyError):
    """Setting a proxy is not supported in the current environment."""

    def __init__(self) -> None:
        super().__init__("failed to set proxy for this environment")