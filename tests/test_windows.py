from unittest import mock

import pytest

from sysproxy import windows
from sysproxy.models import Autoproxy, NotSupportedError, ParseStrError, Sysproxy


class _FakeKey:
    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeWinreg:
    HKEY_CURRENT_USER = "HKEY_CURRENT_USER"
    KEY_READ = 0x20019
    KEY_WRITE = 0x20006
    REG_SZ = 1
    REG_DWORD = 4

    def __init__(self, values=None, missing=False):
        self.values = dict(values or {})
        self.missing = missing
        self.opened = []

    def OpenKey(self, root, sub_key, reserved=0, access=KEY_READ):
        self.opened.append((root, sub_key))
        if self.missing:
            raise FileNotFoundError(2, "missing key")
        return _FakeKey()

    def CreateKeyEx(self, root, sub_key, reserved=0, access=KEY_WRITE):
        self.opened.append((root, sub_key))
        self.missing = False
        return _FakeKey()

    def QueryValueEx(self, key, name):
        if name not in self.values:
            raise FileNotFoundError(2, "missing value")
        data, value_type = self.values[name]
        return data, value_type

    def SetValueEx(self, key, name, reserved, value_type, data):
        self.values[name] = (data, value_type)

    def DeleteValue(self, key, name):
        if name not in self.values:
            raise FileNotFoundError(2, "missing value")
        del self.values[name]


@pytest.fixture
def registry():
    fake = FakeWinreg()
    with mock.patch.object(windows, "winreg", fake):
        yield fake


# parse_server ---------------------------------------------------------------


def test_parse_server_ipv4():
    assert windows.parse_server("127.0.0.1:9090") == ("127.0.0.1", 9090)


def test_parse_server_ipv6():
    assert windows.parse_server("[::1]:8080") == ("::1", 8080)


def test_parse_server_empty():
    assert windows.parse_server("") == ("", 0)


@pytest.mark.parametrize(
    "server",
    ["localhost:80", "127.0.0.1", "127.0.0.1:70000", "1.2.3.4:abc", "[::1]80", "1.2.3.4:"],
)
def test_parse_server_rejects(server):
    with pytest.raises(ParseStrError) as info:
        windows.parse_server(server)
    assert info.value.value == server


# manual proxy ---------------------------------------------------------------


def test_empty_registry_reads_defaults(registry):
    assert windows.get_system_proxy() == Sysproxy()


def test_system_proxy_round_trip(registry):
    proxy = Sysproxy(enable=True, host="127.0.0.1", port=9090, bypass="localhost;127.*")
    windows.set_system_proxy(proxy)
    assert windows.get_system_proxy() == proxy
    assert registry.values["ProxyServer"] == ("127.0.0.1:9090", FakeWinreg.REG_SZ)
    assert registry.opened[0] == (FakeWinreg.HKEY_CURRENT_USER, windows.SUB_KEY)


def test_disable_keeps_server_and_bypass(registry):
    proxy = Sysproxy(enable=True, host="127.0.0.1", port=9090, bypass="localhost;127.*")
    windows.set_system_proxy(proxy)
    proxy.enable = False
    windows.set_system_proxy(proxy)
    assert windows.get_system_proxy() == proxy
    assert registry.values["ProxyEnable"] == (0, FakeWinreg.REG_DWORD)


def test_non_dword_enable_reads_as_disabled(registry):
    registry.values["ProxyEnable"] = ("1", FakeWinreg.REG_SZ)
    assert windows.get_system_proxy().enable is False


def test_invalid_server_in_registry(registry):
    registry.values["ProxyServer"] = ("proxy.example.com:8080", FakeWinreg.REG_SZ)
    with pytest.raises(ParseStrError):
        windows.get_system_proxy()


def test_missing_key_raises_os_error():
    fake = FakeWinreg(missing=True)
    with mock.patch.object(windows, "winreg", fake):
        with pytest.raises(FileNotFoundError):
            windows.get_system_proxy()


def test_without_registry_not_supported():
    with mock.patch.object(windows, "winreg", None):
        with pytest.raises(NotSupportedError):
            windows.get_system_proxy()
        with pytest.raises(NotSupportedError):
            windows.set_auto_proxy(Autoproxy())


# automatic proxy ------------------------------------------------------------


def test_auto_proxy_round_trip(registry):
    auto = Autoproxy(enable=True, url="http://127.0.0.1:1234/")
    windows.set_auto_proxy(auto)
    assert windows.get_auto_proxy() == auto
    assert windows.get_system_proxy().enable is False


def test_auto_proxy_disable_removes_url(registry):
    windows.set_auto_proxy(Autoproxy(enable=True, url="http://127.0.0.1:1234/"))
    windows.set_auto_proxy(Autoproxy(enable=False, url=""))
    assert windows.get_auto_proxy() == Autoproxy(enable=False, url="")
    assert "AutoConfigURL" not in registry.values


def test_manual_proxy_clears_auto_url(registry):
    windows.set_auto_proxy(Autoproxy(enable=True, url="http://127.0.0.1:1234/"))
    windows.set_system_proxy(Sysproxy(enable=True, host="127.0.0.1", port=9090))
    assert windows.get_auto_proxy() == Autoproxy()