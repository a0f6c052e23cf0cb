"""Route types, their validation and their command-line arguments."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

_UINT32_MAX = 0xFFFFFFFF
_UINT16_MAX = 0xFFFF


class RouteError(ValueError):
    """Base class for invalid route data."""


class MissingFieldError(RouteError):
    """A required field is missing."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"missing required field: {field_name}")
        self.field_name = field_name


class InvalidCIDRError(RouteError):
    """The prefix is neither a CIDR nor a plain IP address."""

    def __init__(self, value: str) -> None:
        super().__init__(f"invalid CIDR: {value}")
        self.value = value


class InvalidIPv4Error(RouteError):
    """An address that must be IPv4 is not."""

    def __init__(self, value: str) -> None:
        super().__init__(f"invalid IPv4 address: {value}")
        self.value = value


class MissingViaOrDevError(RouteError):
    """Neither a next hop nor an outgoing device was given."""

    def __init__(self) -> None:
        super().__init__("either 'via' or 'dev' must be specified")


def _field(json_name: str, kind: str, default: Any = None, *, factory: Any = None) -> Any:
    metadata = {"json": json_name, "kind": kind}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_uint32(value: Any) -> bool:
    return _is_int(value) and 0 <= value <= _UINT32_MAX


def _coerce(name: str, kind: str, value: Any) -> Any:
    valid = {
        "str": lambda v: isinstance(v, str),
        "bool": lambda v: isinstance(v, bool),
        "int": _is_int,
        "uint32": _is_uint32,
        "uint32_list": lambda v: isinstance(v, (list, tuple)) and all(map(_is_uint32, v)),
    }[kind]
    if not valid(value):
        raise RouteError(f"field {name}: invalid value {value!r}")
    return list(value) if kind == "uint32_list" else value


def _parse_cidr(text: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    _, sep, bits = text.partition("/")
    if not sep or not (bits.isascii() and bits.isdigit()):
        raise ValueError(f"not a CIDR: {text}")
    return ipaddress.ip_network(text, strict=False)


def _parse_ip(text: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def _is_ipv4(text: str) -> bool:
    address = _parse_ip(text)
    if address is None:
        return False
    return address.version == 4 or address.ipv4_mapped is not None


@dataclass
class Route:
    """Fields shared by every route type."""

    PROTO: ClassVar[str] = ""

    prefix: str = _field("Prefix", "str", "")
    via: str = _field("Via", "str", "")
    dev: str = _field("Dev", "str", "")
    table: str = _field("Table", "str", "main")
    scope: str = _field("Scope", "str", "global")
    metric: int = _field("Metric", "int", 0)
    proto: str = _field("Proto", "str", "")

    def validate(self) -> None:
        """Set the protocol name and check the common fields."""
        self.proto = self.PROTO
        self.validate_base()

    def validate_base(self) -> None:
        """Check the common fields, normalising a bare address and filling defaults."""
        if not self.prefix:
            raise MissingFieldError("prefix")
        try:
            _parse_cidr(self.prefix)
        except ValueError:
            if _parse_ip(self.prefix) is None:
                raise InvalidCIDRError(self.prefix) from None
            self.prefix += "/32"

        if self.via and not _is_ipv4(self.via):
            raise InvalidIPv4Error(f"via: {self.via}")

        if not self.table:
            self.table = "main"
        if not self.scope:
            self.scope = "global"

        if not self.via and not self.dev:
            raise MissingViaOrDevError()

    def to_args(self) -> list[str]:
        """Return the network address and netmask arguments of the prefix."""
        try:
            network = _parse_cidr(self.prefix)
        except ValueError:
            raise InvalidCIDRError(self.prefix) from None
        if network.version != 4:
            raise InvalidIPv4Error(self.prefix)
        return ["--ip", str(network.network_address), "--netmask", str(network.netmask)]

    def to_dict(self) -> dict[str, Any]:
        """Return the route as a JSON-ready mapping keyed by field name."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.metadata["json"]] = list(value) if isinstance(value, list) else value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Route:
        """Build a route from a mapping; keys match field names case-insensitively."""
        if not isinstance(data, Mapping):
            raise RouteError(f"route data must be a mapping, not {type(data).__name__}")
        exact = {f.metadata["json"]: f for f in fields(cls)}
        folded = {name.lower(): f for name, f in exact.items()}
        values: dict[str, Any] = {}
        for key, value in data.items():
            f = exact.get(key) or folded.get(str(key).lower())
            if f is None or value is None:
                continue
            values[f.name] = _coerce(f.metadata["json"], f.metadata["kind"], value)
        return cls(**values)


@dataclass
class StaticRoute(Route):
    """A static kernel route, optionally health-tracked."""

    PROTO: ClassVar[str] = "static"

    track: bool = _field("Track", "bool", False)

    def validate(self) -> None:
        """Validate as a static route."""
        super().validate()

    def to_args(self) -> list[str]:
        """Return the arguments for the static route commands."""
        args = super().to_args()
        if self.via:
            args += ["--nexthop", self.via]
        if self.dev:
            args += ["--interface", self.dev]
        args += ["--track", "true" if self.track else "false"]
        return args


@dataclass
class BGPRoute(Route):
    """A BGP-advertised route with its path attributes."""

    PROTO: ClassVar[str] = "bgp"

    local_pref: int = _field("LocalPref", "uint32", 0)
    med: int = _field("MED", "uint32", 0)
    as_path: list[int] = _field("ASPath", "uint32_list", factory=list)
    communities: list[int] = _field("Communities", "uint32_list", factory=list)
    no_export: bool = _field("NoExport", "bool", False)
    no_adv: bool = _field("NoAdv", "bool", False)

    def validate(self) -> None:
        """Validate as a BGP route."""
        super().validate()

    def to_args(self) -> list[str]:
        """Return the arguments for the BGP route commands."""
        args = super().to_args()
        if self.local_pref > 0:
            args += ["--local-pref", str(self.local_pref)]
        if self.as_path:
            args += ["--as-path", " ".join(str(asn) for asn in self.as_path)]
        if self.table:
            args += ["--table", self.table]
        return args


_OSPF_TYPES = frozenset({"intra-area", "inter-area", "external-1", "external-2"})


@dataclass
class OSPFRoute(Route):
    """An OSPF-learned or injected route."""

    PROTO: ClassVar[str] = "ospf"

    area: str = _field("Area", "str", "")
    route_type: str = _field("Type", "str", "")
    tag: int = _field("Tag", "uint32", 0)

    def validate(self) -> None:
        """Validate as an OSPF route, including the route type if given."""
        super().validate()
        if self.route_type and self.route_type not in _OSPF_TYPES:
            raise RouteError(f"invalid OSPF type: {self.route_type}")

    def to_args(self) -> list[str]:
        """Return the arguments for the OSPF route commands."""
        args = super().to_args() + ["--area", self.area]
        if self.metric > 0:
            args += ["--metric", str(self.metric)]
        if self.dev:
            args += ["--interface", self.dev]
        if self.table:
            args += ["--table", self.table]
        return args


@dataclass
class PBRRule(Route):
    """A policy-based routing rule."""

    PROTO: ClassVar[str] = "pbr"

    fwmark: int = _field("FwMark", "uint32", 0)
    priority: int = _field("Priority", "int", 0)
    from_cidr: str = _field("From", "str", "")
    to_cidr: str = _field("To", "str", "")
    iif: str = _field("Iif", "str", "")

    def validate(self) -> None:
        """Validate as a policy rule."""
        super().validate()

    def to_args(self) -> list[str]:
        """Return the arguments for the policy rule commands."""
        args = ["--id", str(self.priority), "--table", self.table]
        if self.from_cidr:
            args += ["--src-cidr", self.from_cidr]
        if self.to_cidr:
            args += ["--dst-cidr", self.to_cidr]
        if self.proto:
            args += ["--protocol", self.proto]
        if self.priority > 0:
            args += ["--priority", str(self.priority)]
        return args


_DECIMAL = re.compile(r"[0-9]+")
_LEGACY_OCTAL = re.compile(r"0[0-7_]+")
_BASE_PREFIXED = re.compile(r"0[xXoObB][0-9a-fA-F_]+|[1-9][0-9_]*|0")


def parse_community(value: str) -> int:
    """Parse a BGP community given as ``A:B`` or as a single 32-bit number."""
    if ":" in value:
        parts = value.split(":")
        if len(parts) != 2:
            raise RouteError("community must be A:B")
        if not all(_DECIMAL.fullmatch(p) and int(p) <= _UINT16_MAX for p in parts):
            raise RouteError("A and B must be <= 65535")
        high, low = (int(p) for p in parts)
        return high << 16 | low

    try:
        if _LEGACY_OCTAL.fullmatch(value):
            number = int("0o" + value[1:], 0)
        elif _BASE_PREFIXED.fullmatch(value):
            number = int(value, 0)
        else:
            raise ValueError(value)
    except ValueError:
        raise RouteError("invalid community format") from None
    if number > _UINT32_MAX:
        raise RouteError("invalid community format")
    return number