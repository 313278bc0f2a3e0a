"""Get and set the system proxy and automatic proxy on Windows, macOS and Linux."""

__version__ = "0.3.0"
__all__ = ["models", "utils", "linux", "macos", "windows", "proxy"]