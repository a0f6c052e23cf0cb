import pytest

from flyos.routing.routes import (
    BGPRoute,
    InvalidCIDRError,
    InvalidIPv4Error,
    MissingFieldError,
    MissingViaOrDevError,
    OSPFRoute,
    PBRRule,
    Route,
    RouteError,
    StaticRoute,
    parse_community,
)


def test_validate_sets_proto_and_defaults():
    route = StaticRoute(prefix="10.0.0.0/24", via="192.168.1.1", table="", scope="")
    route.validate()
    assert route.proto == "static"
    assert route.table == "main"
    assert route.scope == "global"


@pytest.mark.parametrize(
    "cls, proto",
    [(StaticRoute, "static"), (BGPRoute, "bgp"), (OSPFRoute, "ospf"), (PBRRule, "pbr")],
)
def test_each_type_sets_its_proto(cls, proto):
    route = cls(prefix="10.0.0.0/24", dev="eth0")
    assert route.proto == ""
    route.validate()
    assert route.proto == proto


def test_bare_address_gets_host_prefix():
    route = StaticRoute(prefix="10.0.0.5", dev="eth0")
    route.validate()
    assert route.prefix == "10.0.0.5/32"


def test_missing_prefix():
    with pytest.raises(MissingFieldError) as info:
        StaticRoute(dev="eth0").validate()
    assert info.value.field_name == "prefix"


def test_invalid_prefix():
    with pytest.raises(InvalidCIDRError):
        StaticRoute(prefix="not-a-network", dev="eth0").validate()


def test_ipv6_via_is_rejected():
    with pytest.raises(InvalidIPv4Error):
        StaticRoute(prefix="10.0.0.0/24", via="2001:db8::1").validate()


def test_missing_via_and_dev():
    with pytest.raises(MissingViaOrDevError):
        StaticRoute(prefix="10.0.0.0/24").validate()


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        BGPRoute(prefix="", via="192.168.1.1").validate()


def test_ospf_type_checked():
    OSPFRoute(prefix="10.0.0.0/24", dev="eth0", route_type="intra-area").validate()
    with pytest.raises(RouteError):
        OSPFRoute(prefix="10.0.0.0/24", dev="eth0", route_type="external").validate()


def test_static_args():
    route = StaticRoute(prefix="10.0.0.0/24", via="192.168.1.1", dev="eth0", track=True)
    route.validate()
    assert route.to_args() == [
        "--ip", "10.0.0.0",
        "--netmask", "255.255.255.0",
        "--nexthop", "192.168.1.1",
        "--interface", "eth0",
        "--track", "true",
    ]


def test_static_args_use_network_address():
    route = StaticRoute(prefix="10.0.0.7/24", dev="eth0")
    assert route.to_args()[:2] == ["--ip", "10.0.0.0"]
    assert "--nexthop" not in route.to_args()


def test_bgp_args():
    route = BGPRoute(prefix="172.16.0.0/16", via="10.0.0.1", local_pref=200, as_path=[100, 200])
    route.validate()
    args = route.to_args()
    assert args[4:] == ["--local-pref", "200", "--as-path", "100 200", "--table", "main"]


def test_ospf_args():
    route = OSPFRoute(prefix="192.168.10.0/24", dev="eth1", area="0.0.0.0", metric=20)
    route.validate()
    args = route.to_args()
    assert args[4:] == [
        "--area", "0.0.0.0", "--metric", "20", "--interface", "eth1", "--table", "main",
    ]


def test_pbr_args():
    rule = PBRRule(prefix="10.1.0.0/16", dev="eth1", priority=1000, from_cidr="10.1.0.0/16")
    rule.validate()
    assert rule.to_args() == [
        "--id", "1000",
        "--table", "main",
        "--src-cidr", "10.1.0.0/16",
        "--protocol", "pbr",
        "--priority", "1000",
    ]


def test_to_args_rejects_bad_prefix():
    with pytest.raises(InvalidCIDRError):
        StaticRoute(prefix="garbage", dev="eth0").to_args()


@pytest.mark.parametrize(
    "route",
    [
        StaticRoute(prefix="10.0.0.0/24", via="192.168.1.1", track=True),
        BGPRoute(prefix="172.16.0.0/16", dev="eth0", communities=[1, 2], as_path=[65001]),
        OSPFRoute(prefix="192.168.10.0/24", dev="eth0", area="0.0.0.0", tag=7),
        PBRRule(prefix="10.1.0.0/16", dev="eth1", fwmark=100, iif="eth1", to_cidr="1.2.3.0/24"),
    ],
)
def test_dict_round_trip(route):
    assert type(route).from_dict(route.to_dict()) == route


def test_to_dict_uses_field_names():
    data = StaticRoute(prefix="10.0.0.0/24", dev="eth0").to_dict()
    assert data["Prefix"] == "10.0.0.0/24"
    assert data["Dev"] == "eth0"
    assert data["Track"] is False


def test_from_dict_is_case_insensitive_and_ignores_unknown():
    route = StaticRoute.from_dict({"prefix": "10.0.0.0/24", "VIA": "10.0.0.1", "extra": 1})
    assert route.prefix == "10.0.0.0/24"
    assert route.via == "10.0.0.1"
    assert route.table == "main"


@pytest.mark.parametrize(
    "data",
    [
        {"Prefix": 5},
        {"Track": "yes"},
        {"Metric": True},
    ],
)
def test_from_dict_rejects_wrong_types(data):
    with pytest.raises(RouteError):
        StaticRoute.from_dict(data)


def test_from_dict_rejects_out_of_range_uint32():
    with pytest.raises(RouteError):
        BGPRoute.from_dict({"LocalPref": -1})
    with pytest.raises(RouteError):
        BGPRoute.from_dict({"Communities": [2**32]})


def test_from_dict_requires_mapping():
    with pytest.raises(RouteError):
        Route.from_dict([1, 2])


def test_parse_community_pair():
    value = parse_community("65001:100")
    assert value >> 16 == 65001
    assert value & 0xFFFF == 100


@pytest.mark.parametrize("number", [0, 1, 65535, 2**32 - 1])
def test_parse_community_number_forms(number):
    assert parse_community(str(number)) == number
    assert parse_community(hex(number)) == number


def test_parse_community_legacy_octal():
    assert parse_community("010") == parse_community("8")


@pytest.mark.parametrize("text", ["1:2:3", "65536:1", "a:1", "abc", "-1", str(2**32), ""])
def test_parse_community_errors(text):
    with pytest.raises(RouteError):
        parse_community(text)