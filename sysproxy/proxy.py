"""Read and write the system proxy on whichever platform is running."""

from __future__ import annotations

import sys
from types import ModuleType

from .models import Autoproxy, NotSupportedError, Sysproxy

__all__ = [
    "is_supported",
    "get_system_proxy",
    "set_system_proxy",
    "get_auto_proxy",
    "set_auto_proxy",
]


def _platform_kind() -> str | None:
    platform = sys.platform
    if platform.startswith("linux"):
        return "linux"
    if platform == "darwin":
        return "macos"
    if platform == "win32":
        return "windows"
    return None


def _backend() -> ModuleType:
    kind = _platform_kind()
    if kind == "linux":
        from . import linux

        return linux
    if kind == "macos":
        from . import macos

        return macos
    if kind == "windows":
        from . import windows

        return windows
    raise NotSupportedError()


def is_supported() -> bool:
    """Report whether the running platform can have its proxy read and set."""
    return _platform_kind() is not None


def get_system_proxy() -> Sysproxy:
    """Read the current manual proxy configuration."""
    return _backend().get_system_proxy()


def set_system_proxy(proxy: Sysproxy) -> None:
    """Apply a manual proxy configuration."""
    _backend().set_system_proxy(proxy)


def get_auto_proxy() -> Autoproxy:
    """Read the current automatic proxy configuration."""
    return _backend().get_auto_proxy()


def set_auto_proxy(proxy: Autoproxy) -> None:
    """Apply an automatic proxy configuration."""
    _backend().set_auto_proxy(proxy)