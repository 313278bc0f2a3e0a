from dataclasses import replace

import pytest

from sysproxy.models import (
    Autoproxy,
    NetworkInterfaceError,
    NotSupportedError,
    ParseStrError,
    Sysproxy,
    SysproxyError,
)


def test_sysproxy_defaults():
    proxy = Sysproxy()
    assert (proxy.enable, proxy.host, proxy.port, proxy.bypass) == (False, "", 0, "")


def test_autoproxy_defaults():
    proxy = Autoproxy()
    assert (proxy.enable, proxy.url) == (False, "")


def test_sysproxy_equality_and_mutation():
    proxy = Sysproxy(enable=True, host="127.0.0.1", port=9090, bypass="localhost,127.0.0.1/8")
    same = Sysproxy(enable=True, host="127.0.0.1", port=9090, bypass="localhost,127.0.0.1/8")
    assert proxy == same
    proxy.enable = False
    assert proxy != same
    assert proxy == replace(same, enable=False)


def test_autoproxy_equality():
    auto = Autoproxy(enable=True, url="http://127.0.0.1:1234/")
    assert auto == Autoproxy(enable=True, url="http://127.0.0.1:1234/")
    assert auto != Autoproxy(enable=False, url="")


@pytest.mark.parametrize("port", [-1, 65536])
def test_sysproxy_rejects_out_of_range_port(port):
    with pytest.raises(ValueError):
        Sysproxy(port=port)


@pytest.mark.parametrize("port", [0, 65535])
def test_sysproxy_accepts_port_limits(port):
    assert Sysproxy(port=port).port == port


def test_parse_str_error_message():
    err = ParseStrError("mode")
    assert str(err) == "failed to parse string `mode`"
    assert err.value == "mode"
    assert isinstance(err, SysproxyError)


def test_network_interface_error_message():
    err = NetworkInterfaceError()
    assert str(err) == "failed to get default network interface"
    assert isinstance(err, SysproxyError)


def test_not_supported_error_message():
    err = NotSupportedError()
    assert str(err) == "failed to set proxy for this environment"
    assert isinstance(err, SysproxyError)