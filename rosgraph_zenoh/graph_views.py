"""Read-only views over the cached graph: type names, endpoint info and name checks."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .graph_model import TopicMap
from .qos_keyexpr import QosProfile

_DDS_MARKER = "dds_::"
_TYPE_HASH = re.compile(r"RIHS01_[0-9a-f]{64}")
_NODE_NAME = re.compile(r"[A-Za-z0-9_]*")
_NAMESPACE_CHARS = re.compile(r"[A-Za-z0-9_/]*")

NODE_NAME_MAX_LENGTH = 255
TOPIC_MAX_NAME_LENGTH = 255 - 8
NAMESPACE_MAX_LENGTH = TOPIC_MAX_NAME_LENGTH - 2


class EndpointType(enum.IntEnum):
    """Whether an endpoint publishes or subscribes."""

    INVALID = 0
    PUBLISHER = 1
    SUBSCRIPTION = 2


@dataclass(frozen=True)
class TopicEndpointInfo:
    """Description of one publisher or subscription on a topic.

    A ``topic_type_hash`` that is not a valid ``RIHS01_`` hash string is dropped.
    """

    node_name: str
    node_namespace: str
    topic_type: str
    endpoint_type: EndpointType
    qos: QosProfile
    endpoint_gid: bytes = b""
    topic_type_hash: Optional[str] = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "endpoint_type", EndpointType(self.endpoint_type))
        object.__setattr__(self, "endpoint_gid", bytes(self.endpoint_gid))
        if self.topic_type_hash is not None and not _TYPE_HASH.fullmatch(
            self.topic_type_hash
        ):
            object.__setattr__(self, "topic_type_hash", None)


def demangle_if_ros_type(type_name: str) -> str:
    """Turn ``pkg::msg::dds_::Name_`` into ``pkg/msg/Name``; other names pass unchanged."""
    if not type_name.endswith("_"):
        return type_name
    position = type_name.find(_DDS_MARKER)
    if position < 0:
        return type_name
    type_namespace = type_name[:position].replace("::", "/")
    start = position + len(_DDS_MARKER)
    return type_namespace + type_name[start:-1]


def names_and_types(topic_map: TopicMap) -> List[Tuple[str, List[str]]]:
    """List each topic name, in insertion order, with its demangled type names."""
    return [
        (name, [demangle_if_ros_type(type_name) for type_name in type_map])
        for name, type_map in topic_map.items()
    ]


def validate_node_name(name: str) -> str:
    """Return ``name`` if it is a valid node name; raise ValueError otherwise."""
    if not name:
        raise ValueError("node name must not be empty")
    if not _NODE_NAME.fullmatch(name):
        raise ValueError(
            "node name must not contain characters other than alphanumerics or '_'"
        )
    if name[0].isdigit():
        raise ValueError("node name must not start with a number")
    if len(name) > NODE_NAME_MAX_LENGTH:
        raise ValueError(f"node name should not exceed '{NODE_NAME_MAX_LENGTH}'")
    return name


def validate_namespace(namespace: str) -> str:
    """Return ``namespace`` if it is a valid absolute namespace; raise ValueError otherwise."""
    if not namespace:
        raise ValueError("namespace must not be empty")
    if namespace == "/":
        return namespace
    if not namespace.startswith("/"):
        raise ValueError("namespace must be absolute, it must lead with a '/'")
    if namespace.endswith("/"):
        raise ValueError("namespace must not end with a '/', unless only a '/'")
    if not _NAMESPACE_CHARS.fullmatch(namespace):
        raise ValueError(
            "namespace must not contain characters other than alphanumerics, '_', or '/'"
        )
    if "//" in namespace:
        raise ValueError("namespace must not contain repeated '/'")
    if any(token[:1].isdigit() for token in namespace.split("/")):
        raise ValueError("namespace must not have a token that starts with a number")
    if len(namespace) > NAMESPACE_MAX_LENGTH:
        raise ValueError(f"namespace should not exceed '{NAMESPACE_MAX_LENGTH}'")
    return namespace