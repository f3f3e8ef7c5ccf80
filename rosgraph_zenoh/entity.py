"""Graph entities and their liveliness key expressions."""

from __future__ import annotations

import enum
import hashlib
import re
from dataclasses import InitVar, dataclass, field
from itertools import takewhile
from typing import Dict, Optional

from .qos_keyexpr import QosProfile, demangle_name, keyexpr_to_qos, mangle_name, qos_to_keyexpr

IDENTIFIER = "rosgraph_zenoh"

ADMIN_SPACE = "@ros2_lv"
GID_STORAGE_SIZE = 16

_KEYEXPR_DELIMITER = "/"
_ULONG_MAX = 2**64 - 1
_LEADING_NUMBER = re.compile(r"\s*([+-]?)(\d+)")

# Positions of the components within a liveliness key expression.
_ADMIN_SPACE = 0
_DOMAIN_ID = 1
_ZID = 2
_NID = 3
_ID = 4
_ENTITY_STR = 5
_ENCLAVE = 6
_NAMESPACE = 7
_NODE_NAME = 8
_TOPIC_NAME = 9
_TOPIC_TYPE = 10
_TOPIC_TYPE_HASH = 11
_TOPIC_QOS = 12

_MIN_PARTS = _NODE_NAME + 1
_MAX_PARTS = _TOPIC_QOS + 1


class EntityType(enum.IntEnum):
    """The kinds of entities that announce themselves on the graph."""

    NODE = 0
    PUBLISHER = 1
    SUBSCRIPTION = 2
    SERVICE = 3
    CLIENT = 4


_ENTITY_TO_STR: Dict[EntityType, str] = {
    EntityType.NODE: "NN",
    EntityType.PUBLISHER: "MP",
    EntityType.SUBSCRIPTION: "MS",
    EntityType.SERVICE: "SS",
    EntityType.CLIENT: "SC",
}
_STR_TO_ENTITY: Dict[str, EntityType] = {text: kind for kind, text in _ENTITY_TO_STR.items()}


def _strip_slashes(text: str) -> str:
    start = 1 if text.startswith("/") else 0
    end = len(text) - 1 if text.endswith("/") else len(text)
    return text[start:end]


def _parse_domain_id(text: str) -> int:
    match = _LEADING_NUMBER.match(text)
    if match is None:
        raise ValueError(f"Invalid domain id in liveliness token: {text!r}")
    value = int(match.group(2))
    if value > _ULONG_MAX:
        raise ValueError(f"Domain id out of range in liveliness token: {text!r}")
    if match.group(1) == "-":
        value = (-value) % (_ULONG_MAX + 1)
    return value


@dataclass(frozen=True)
class NodeInfo:
    """Identity of the node an entity belongs to."""

    domain_id: int
    ns: str
    name: str
    enclave: str


@dataclass(frozen=True)
class TopicInfo:
    """Topic name, type and QoS of a publisher, subscription, service or client."""

    domain_id: InitVar[int]
    name: str
    type: str
    type_hash: str
    qos: QosProfile
    topic_keyexpr: str = field(init=False)

    def __post_init__(self, domain_id: int) -> None:
        keyexpr = _KEYEXPR_DELIMITER.join(
            (str(domain_id), _strip_slashes(self.name), self.type, self.type_hash)
        )
        object.__setattr__(self, "topic_keyexpr", keyexpr)


def subscription_token(domain_id: int) -> str:
    """Return the key expression that matches every liveliness token of a domain."""
    return f"{ADMIN_SPACE}/{domain_id}/**"


def hash_gid(gid: bytes) -> int:
    """Hash a GID into an unsigned 64-bit integer used to index maps."""
    hex_text = "".join(f"{byte:x}" for byte in gid)
    digest = hashlib.blake2b(hex_text.encode("ascii"), digest_size=8).digest()
    return int.from_bytes(digest, "little")


@dataclass(frozen=True, eq=False)
class Entity:
    """A node, publisher, subscription, service or client seen on the graph.

    Two entities are equal when their key-expression hashes are equal.
    """

    zid: str
    nid: str
    id: str
    type: EntityType
    node_info: NodeInfo
    topic_info: Optional[TopicInfo] = None
    liveliness_keyexpr: str = field(init=False)
    gid: bytes = field(init=False)
    keyexpr_hash: int = field(init=False)

    def __post_init__(self) -> None:
        parts = [""] * _MAX_PARTS
        parts[_ADMIN_SPACE] = ADMIN_SPACE
        parts[_DOMAIN_ID] = str(self.node_info.domain_id)
        parts[_ZID] = self.zid
        parts[_NID] = self.nid
        parts[_ID] = self.id
        parts[_ENTITY_STR] = _ENTITY_TO_STR[EntityType(self.type)]
        parts[_ENCLAVE] = mangle_name(self.node_info.enclave)
        parts[_NAMESPACE] = mangle_name(self.node_info.ns)
        parts[_NODE_NAME] = mangle_name(self.node_info.name)
        if self.topic_info is not None:
            parts[_TOPIC_NAME] = mangle_name(self.topic_info.name)
            parts[_TOPIC_TYPE] = mangle_name(self.topic_info.type)
            parts[_TOPIC_TYPE_HASH] = mangle_name(self.topic_info.type_hash)
            parts[_TOPIC_QOS] = qos_to_keyexpr(self.topic_info.qos)

        # Components are appended until the first empty one.
        keyexpr = _KEYEXPR_DELIMITER.join([parts[0], *takewhile(bool, parts[1:])])
        gid = hashlib.blake2b(keyexpr.encode("utf-8"), digest_size=GID_STORAGE_SIZE).digest()
        object.__setattr__(self, "liveliness_keyexpr", keyexpr)
        object.__setattr__(self, "gid", gid)
        object.__setattr__(self, "keyexpr_hash", hash_gid(gid))

    @classmethod
    def create(
        cls,
        zid: str,
        nid: str,
        id: str,
        entity_type: EntityType,
        node_info: NodeInfo,
        topic_info: Optional[TopicInfo] = None,
    ) -> "Entity":
        """Build a validated entity; raises ValueError when a required field is missing."""
        if not id:
            raise ValueError("Invalid id.")
        try:
            entity_type = EntityType(entity_type)
        except ValueError:
            raise ValueError("Invalid entity type.") from None
        if not node_info.ns or not node_info.name:
            raise ValueError("Invalid node_info for entity.")
        if entity_type is not EntityType.NODE and topic_info is None:
            raise ValueError("Invalid topic_info for entity.")
        return cls(str(zid), nid, id, entity_type, node_info, topic_info)

    @classmethod
    def from_keyexpr(cls, keyexpr: str) -> "Entity":
        """Parse a liveliness key expression; raises ValueError when it is invalid."""
        parts = keyexpr.split(_KEYEXPR_DELIMITER)
        if len(parts) < _MIN_PARTS:
            raise ValueError(
                f"Received invalid liveliness token with {len(parts)}/{_MIN_PARTS} parts: "
                f"{keyexpr}"
            )
        if not all(parts):
            raise ValueError(f"Received invalid liveliness token with empty parts: {keyexpr}")
        if parts[_ADMIN_SPACE] != ADMIN_SPACE:
            raise ValueError("Received liveliness token with invalid admin space.")
        entity_str = parts[_ENTITY_STR]
        entity_type = _STR_TO_ENTITY.get(entity_str)
        if entity_type is None:
            raise ValueError(f"Received liveliness token with invalid entity {entity_str}.")

        domain_id = _parse_domain_id(parts[_DOMAIN_ID])
        node_info = NodeInfo(
            domain_id=domain_id,
            ns=demangle_name(parts[_NAMESPACE]),
            name=demangle_name(parts[_NODE_NAME]),
            enclave=demangle_name(parts[_ENCLAVE]),
        )

        topic_info: Optional[TopicInfo] = None
        if entity_type is not EntityType.NODE:
            if len(parts) < _MAX_PARTS:
                raise ValueError(
                    "Received liveliness token for non-node entity without required parameters."
                )
            try:
                qos = keyexpr_to_qos(parts[_TOPIC_QOS])
            except ValueError as exc:
                raise ValueError(
                    f"Received liveliness token with invalid qos keyexpr: {exc}"
                ) from exc
            topic_info = TopicInfo(
                domain_id,
                demangle_name(parts[_TOPIC_NAME]),
                demangle_name(parts[_TOPIC_TYPE]),
                demangle_name(parts[_TOPIC_TYPE_HASH]),
                qos,
            )

        return cls(parts[_ZID], parts[_NID], parts[_ID], entity_type, node_info, topic_info)

    @property
    def node_namespace(self) -> str:
        return self.node_info.ns

    @property
    def node_name(self) -> str:
        return self.node_info.name

    @property
    def node_enclave(self) -> str:
        return self.node_info.enclave

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return NotImplemented
        return self.keyexpr_hash == other.keyexpr_hash

    def __hash__(self) -> int:
        return self.keyexpr_hash