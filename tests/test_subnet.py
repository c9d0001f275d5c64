"""Tests for AP subnet derivation and the adjacency conflict check."""

import pytest

from raspi_provisioning.access_point.models import ApSubnet
from raspi_provisioning.access_point.subnet import derive_ap_subnet, is_adjacent_subnet, parse_ipv4_cidr
from raspi_provisioning.common.types import SubnetError
from raspi_provisioning.config import AccessPointSettings

IP_ADDR_OUTPUT = """\
2: eth0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc mq state UP group default qlen 1000
    inet 192.168.1.23/24 brd 192.168.1.255 scope global dynamic noprefixroute eth0
       valid_lft 85612sec preferred_lft 85612sec
    inet 10.0.0.5/8 scope global secondary eth0
"""


def test_parse_ipv4_cidr_takes_first_inet():
    assert parse_ipv4_cidr(IP_ADDR_OUTPUT) == "192.168.1.23/24"
    assert parse_ipv4_cidr("2: eth0: <NO-CARRIER> state DOWN\n") is None


def test_derive_increments_third_octet():
    subnet = derive_ap_subnet("192.168.1.0/24")

    assert subnet.cidr == "192.168.2.1/24"
    assert subnet.gateway == "192.168.2.1"
    assert subnet.range_start == "192.168.2.10"
    assert subnet.range_end == "192.168.2.50"
    assert subnet.network == "192.168.2.0"
    assert subnet.netmask == "255.255.255.0"
    assert subnet.source_cidr == "192.168.1.0/24"


def test_derive_without_uplink_uses_default():
    subnet = derive_ap_subnet(None)

    assert subnet.cidr == "192.168.4.1/24"
    assert subnet.range_start == "192.168.4.10"
    assert subnet.range_end == "192.168.4.50"
    assert subnet.source_cidr is None


def test_derive_honours_configured_host_range():
    settings = AccessPointSettings(range_start_host=100, range_end_host=200)

    subnet = derive_ap_subnet("10.1.7.42/16", settings)

    assert subnet.gateway == "10.1.8.1"
    assert (subnet.range_start, subnet.range_end) == ("10.1.8.100", "10.1.8.200")


def test_derive_rejects_overflowing_octet():
    with pytest.raises(SubnetError):
        derive_ap_subnet("192.168.255.4/24")


def test_adjacency_check_matches_only_plus_one_layout():
    derived = derive_ap_subnet("192.168.1.0/24")
    assert is_adjacent_subnet("192.168.1.0/24", derived) is True

    unrelated = ApSubnet(gateway="192.168.4.1", range_start="192.168.4.10", range_end="192.168.4.50")
    assert is_adjacent_subnet("192.168.1.0/24", unrelated) is False
    assert is_adjacent_subnet("10.0.3.7/24", ApSubnet("10.1.4.1", "10.1.4.10", "10.1.4.50")) is False
