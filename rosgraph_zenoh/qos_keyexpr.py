"""QoS profiles and their compact key-expression encoding."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Dict, Optional, Type, TypeVar

_QOS_DELIMITER = ":"
_QOS_COMPONENT_DELIMITER = ","
_SLASH_REPLACEMENT = "%"
_ULONG_MAX = 2**64 - 1
_NUMBER = re.compile(r"\s*([+-]?)(\d+)")


class ReliabilityPolicy(enum.IntEnum):
    SYSTEM_DEFAULT = 0
    RELIABLE = 1
    BEST_EFFORT = 2
    UNKNOWN = 3
    BEST_AVAILABLE = 4


class DurabilityPolicy(enum.IntEnum):
    SYSTEM_DEFAULT = 0
    TRANSIENT_LOCAL = 1
    VOLATILE = 2
    UNKNOWN = 3
    BEST_AVAILABLE = 4


class HistoryPolicy(enum.IntEnum):
    SYSTEM_DEFAULT = 0
    KEEP_LAST = 1
    KEEP_ALL = 2
    UNKNOWN = 3


class LivelinessPolicy(enum.IntEnum):
    SYSTEM_DEFAULT = 0
    AUTOMATIC = 1
    MANUAL_BY_NODE = 2
    MANUAL_BY_TOPIC = 3
    UNKNOWN = 4
    BEST_AVAILABLE = 5


class QosCompatibility(enum.Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Duration:
    """A duration split into seconds and nanoseconds; (0, 0) means unspecified."""

    sec: int = 0
    nsec: int = 0

    @property
    def total_nsec(self) -> int:
        return self.sec * 1_000_000_000 + self.nsec

    @property
    def is_unspecified(self) -> bool:
        return self.sec == 0 and self.nsec == 0


@dataclass(frozen=True)
class QosProfile:
    history: HistoryPolicy = HistoryPolicy.KEEP_LAST
    depth: int = 10
    reliability: ReliabilityPolicy = ReliabilityPolicy.RELIABLE
    durability: DurabilityPolicy = DurabilityPolicy.VOLATILE
    deadline: Duration = field(default_factory=Duration)
    lifespan: Duration = field(default_factory=Duration)
    liveliness: LivelinessPolicy = LivelinessPolicy.AUTOMATIC
    liveliness_lease_duration: Duration = field(default_factory=Duration)


_E = TypeVar("_E", bound=enum.IntEnum)


def _lookup_table(*members: _E) -> Dict[str, _E]:
    return {str(int(member)): member for member in members}


# Only these policy values are accepted when decoding a key expression.
_STR_TO_HISTORY = _lookup_table(
    HistoryPolicy.SYSTEM_DEFAULT,
    HistoryPolicy.KEEP_LAST,
    HistoryPolicy.KEEP_ALL,
    HistoryPolicy.UNKNOWN,
)
_STR_TO_RELIABILITY = _lookup_table(
    ReliabilityPolicy.SYSTEM_DEFAULT,
    ReliabilityPolicy.RELIABLE,
    ReliabilityPolicy.BEST_EFFORT,
    ReliabilityPolicy.UNKNOWN,
)
_STR_TO_DURABILITY = _lookup_table(
    DurabilityPolicy.SYSTEM_DEFAULT,
    DurabilityPolicy.TRANSIENT_LOCAL,
    DurabilityPolicy.VOLATILE,
    DurabilityPolicy.UNKNOWN,
)
_STR_TO_LIVELINESS = _lookup_table(
    LivelinessPolicy.SYSTEM_DEFAULT,
    LivelinessPolicy.AUTOMATIC,
    LivelinessPolicy.MANUAL_BY_TOPIC,
    LivelinessPolicy.UNKNOWN,
    LivelinessPolicy.BEST_AVAILABLE,
)


def _field(value: int, default_value: int) -> str:
    return "" if value == default_value else str(int(value))


def qos_to_keyexpr(qos: QosProfile, default: Optional[QosProfile] = None) -> str:
    """Encode ``qos``, leaving out every value equal to the one in ``default``.

    The form is
    ``reliability:durability:history,depth:dl_sec,dl_nsec:ls_sec,ls_nsec:liveliness,lease_sec,lease_nsec``.
    """
    d = default if default is not None else QosProfile()
    c = _QOS_COMPONENT_DELIMITER
    groups = [
        _field(qos.reliability, d.reliability),
        _field(qos.durability, d.durability),
        _field(qos.history, d.history) + c + _field(qos.depth, d.depth),
        _field(qos.deadline.sec, d.deadline.sec) + c
        + _field(qos.deadline.nsec, d.deadline.nsec),
        _field(qos.lifespan.sec, d.lifespan.sec) + c
        + _field(qos.lifespan.nsec, d.lifespan.nsec),
        _field(qos.liveliness, d.liveliness) + c
        + _field(qos.liveliness_lease_duration.sec, d.liveliness_lease_duration.sec) + c
        + _field(qos.liveliness_lease_duration.nsec, d.liveliness_lease_duration.nsec),
    ]
    return _QOS_DELIMITER.join(groups)


def _parse_unsigned(text: str, default_value: int) -> int:
    if not text:
        return default_value
    match = _NUMBER.match(text)
    if match is None:
        raise ValueError("no valid numbers available")
    if match.end() != len(text):
        raise ValueError("non-numeric values")
    value = int(match.group(2))
    if value > _ULONG_MAX:
        raise ValueError(
            "an undefined error occurred while getting the number, this may be an overflow"
        )
    if match.group(1) == "-":
        value = (-value) % (_ULONG_MAX + 1)
    return value


def _parse_policy(text: str, table: Dict[str, _E], default_value: _E, kind: str) -> _E:
    if not text:
        return default_value
    try:
        return table[text]
    except KeyError:
        raise ValueError(
            f"Error setting QoS values from strings: invalid {kind} '{text}'"
        ) from None


def keyexpr_to_qos(keyexpr: str, default: Optional[QosProfile] = None) -> QosProfile:
    """Decode a QoS key expression; empty fields take their value from ``default``.

    Raises ValueError when the expression is malformed.
    """
    d = default if default is not None else QosProfile()
    parts = keyexpr.split(_QOS_DELIMITER)
    if len(parts) < 6:
        raise ValueError(f"QoS key expression has too few parts: {keyexpr!r}")
    c = _QOS_COMPONENT_DELIMITER
    history_parts = parts[2].split(c)
    deadline_parts = parts[3].split(c)
    lifespan_parts = parts[4].split(c)
    liveliness_parts = parts[5].split(c)
    if len(history_parts) < 2 or len(deadline_parts) < 2 or len(lifespan_parts) < 2:
        raise ValueError(f"QoS key expression has incomplete components: {keyexpr!r}")
    if len(liveliness_parts) < 3:
        raise ValueError(f"QoS key expression has incomplete liveliness: {keyexpr!r}")

    history = _parse_policy(history_parts[0], _STR_TO_HISTORY, d.history, "history")
    reliability = _parse_policy(parts[0], _STR_TO_RELIABILITY, d.reliability, "reliability")
    durability = _parse_policy(parts[1], _STR_TO_DURABILITY, d.durability, "durability")
    liveliness = _parse_policy(
        liveliness_parts[0], _STR_TO_LIVELINESS, d.liveliness, "liveliness"
    )

    return QosProfile(
        history=history,
        depth=_parse_unsigned(history_parts[1], d.depth),
        reliability=reliability,
        durability=durability,
        deadline=Duration(
            _parse_unsigned(deadline_parts[0], d.deadline.sec),
            _parse_unsigned(deadline_parts[1], d.deadline.nsec),
        ),
        lifespan=Duration(
            _parse_unsigned(lifespan_parts[0], d.lifespan.sec),
            _parse_unsigned(lifespan_parts[1], d.lifespan.nsec),
        ),
        liveliness=liveliness,
        liveliness_lease_duration=Duration(
            _parse_unsigned(liveliness_parts[1], d.liveliness_lease_duration.sec),
            _parse_unsigned(liveliness_parts[2], d.liveliness_lease_duration.nsec),
        ),
    )


def _duration_conflict(pub: Duration, sub: Duration) -> bool:
    if pub.is_unspecified:
        return not sub.is_unspecified
    if sub.is_unspecified:
        return False
    return sub.total_nsec < pub.total_nsec


def check_compatible(publisher_qos: QosProfile, subscription_qos: QosProfile) -> QosCompatibility:
    """Tell whether a publisher and a subscription with these profiles can communicate."""
    pub, sub = publisher_qos, subscription_qos
    unknown_reliability = (ReliabilityPolicy.SYSTEM_DEFAULT, ReliabilityPolicy.UNKNOWN)
    unknown_durability = (DurabilityPolicy.SYSTEM_DEFAULT, DurabilityPolicy.UNKNOWN)
    unknown_liveliness = (LivelinessPolicy.SYSTEM_DEFAULT, LivelinessPolicy.UNKNOWN)

    errors = [
        pub.reliability == ReliabilityPolicy.BEST_EFFORT
        and sub.reliability == ReliabilityPolicy.RELIABLE,
        pub.durability == DurabilityPolicy.VOLATILE
        and sub.durability == DurabilityPolicy.TRANSIENT_LOCAL,
        _duration_conflict(pub.deadline, sub.deadline),
        pub.liveliness == LivelinessPolicy.AUTOMATIC
        and sub.liveliness == LivelinessPolicy.MANUAL_BY_TOPIC,
        _duration_conflict(pub.liveliness_lease_duration, sub.liveliness_lease_duration),
    ]
    if any(errors):
        return QosCompatibility.ERROR

    warnings = [
        pub.reliability in unknown_reliability
        and sub.reliability == ReliabilityPolicy.RELIABLE,
        pub.reliability == ReliabilityPolicy.BEST_EFFORT
        and sub.reliability in unknown_reliability,
        pub.durability in unknown_durability
        and sub.durability == DurabilityPolicy.TRANSIENT_LOCAL,
        pub.durability == DurabilityPolicy.VOLATILE
        and sub.durability in unknown_durability,
        pub.liveliness in unknown_liveliness
        and sub.liveliness == LivelinessPolicy.MANUAL_BY_TOPIC,
        pub.liveliness == LivelinessPolicy.AUTOMATIC
        and sub.liveliness in unknown_liveliness,
    ]
    if any(warnings):
        return QosCompatibility.WARNING
    return QosCompatibility.OK


def mangle_name(name: str) -> str:
    """Replace every '/' with '%'."""
    return name.replace("/", _SLASH_REPLACEMENT)


def demangle_name(name: str) -> str:
    """Replace every '%' with '/'."""
    return name.replace(_SLASH_REPLACEMENT, "/")