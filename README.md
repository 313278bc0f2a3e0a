# sysproxy

Read and change the operating system's proxy settings from Python.

- **Windows**: the current user's `Internet Settings` registry key
  (`ProxyEnable`, `ProxyServer`, `ProxyOverride`, `AutoConfigURL`).
- **macOS**: the `networksetup` tool, applied to the default network service.
- **Linux**: GNOME via `gsettings`; on KDE (`XDG_CURRENT_DESKTOP=KDE`) the
  `kioslaverc` file is also read and written with `kreadconfig5`/`kwriteconfig5`
  (or the `6` variants when `KDE_SESSION_VERSION=6`). When `APPIMAGE` is set,
  these tools are started without `LD_LIBRARY_PATH`.

## Installation

```
pip install sysproxy
```

## Manual proxy

```python
from sysproxy.models import Sysproxy
from sysproxy.proxy import get_system_proxy, set_system_proxy, is_supported

if is_supported():
    current = get_system_proxy()
    print(current.enable, current.host, current.port, current.bypass)

    set_system_proxy(Sysproxy(
        enable=True,
        host="127.0.0.1",
        port=9090,
        bypass="localhost,127.0.0.1/8",
    ))
```

`Sysproxy` is a dataclass with `enable`, `host`, `port` and `bypass`; a port
outside 0–65535 raises `ValueError`. `bypass` is a comma-separated host list
on Linux and macOS, and a semicolon-separated list (for example
`localhost;127.*`) on Windows. Disable the proxy by setting a `Sysproxy` with
`enable=False`.

When reading, the SOCKS, HTTP and HTTPS settings are combined into one
`Sysproxy`: the SOCKS entry is used unless it is empty (Linux) or disabled
(macOS), in which case the HTTP and then the HTTPS entry take its place.
On Windows, `ProxyServer` must hold an IP address and port
(`1.2.3.4:8080` or `[::1]:8080`); anything else raises `ParseStrError`.

## Automatic proxy (PAC)

```python
from sysproxy.models import Autoproxy
from sysproxy.proxy import get_auto_proxy, set_auto_proxy

set_auto_proxy(Autoproxy(enable=True, url="http://127.0.0.1:1234/"))
print(get_auto_proxy())
set_auto_proxy(Autoproxy(enable=False, url=""))
```

## Bypass helpers

Windows bypass lists do not accept CIDR notation. Wildcards can be made
from an IPv4 CIDR:

```python
from sysproxy.utils import ipv4_cidr_to_wildcard

ipv4_cidr_to_wildcard("127.0.0.1/8")   # ["127.*"]
```

## Errors

Failures raise `SysproxyError` or one of its subclasses from
`sysproxy.models`: `ParseStrError` when a tool's output or a given value
cannot be parsed, `NetworkInterfaceError` when no default network service
is found on macOS, and `NotSupportedError` on an unsupported platform (and
from `sysproxy.windows` when the registry is not available). Errors from
starting the system tools or opening the registry surface as `OSError`.

## Platform modules

`sysproxy.linux`, `sysproxy.macos` and `sysproxy.windows` expose the
per-platform operations, such as setting only the HTTP proxy
(`linux.set_http`) or reading the bypass list of one macOS network service
(`macos.get_bypass(service)`). `sysproxy.proxy` picks the right one for the
running platform.

## Limitations

- On Windows the settings are written to the registry only; no settings-change
  notification is sent, so programs that are already running may not see the
  new proxy until they read the settings again.
- There is no command-line tool; the package is used as a library.