"""Data structures that make up the cached graph: topic data and graph nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set

from .entity import Entity, EntityType, TopicInfo

EntitySet = Set[Entity]


def _is_pub(entity: Entity) -> bool:
    # Publishers and clients share bookkeeping, as do subscriptions and services.
    return entity.type in (EntityType.PUBLISHER, EntityType.CLIENT)


@dataclass(eq=False)
class TopicData:
    """Entities on one topic name, type and QoS.

    ``pubs`` holds publishers or clients; ``subs`` holds subscriptions or services.
    """

    info: TopicInfo
    pubs: EntitySet = field(default_factory=set)
    subs: EntitySet = field(default_factory=set)

    @classmethod
    def from_entity(cls, entity: Entity) -> "TopicData":
        """Start topic data holding ``entity``; raises ValueError if it has no topic info."""
        if entity.topic_info is None:
            raise ValueError(
                f"Entity {entity.liveliness_keyexpr} carries no topic information."
            )
        data = cls(entity.topic_info)
        if _is_pub(entity):
            data.pubs.add(entity)
        else:
            data.subs.add(entity)
        return data


# QoS key expression -> TopicData
TopicQoSMap = Dict[str, TopicData]
# Topic type -> TopicQoSMap
TopicTypeMap = Dict[str, TopicQoSMap]
# Topic name -> TopicTypeMap; dicts keep insertion order, which callers rely on.
TopicMap = Dict[str, TopicTypeMap]


@dataclass(eq=False)
class GraphNode:
    """A node on the graph with the topics and services its entities use."""

    zid: str
    nid: str
    ns: str
    name: str
    enclave: str
    pubs: TopicMap = field(default_factory=dict)
    subs: TopicMap = field(default_factory=dict)
    clients: TopicMap = field(default_factory=dict)
    services: TopicMap = field(default_factory=dict)