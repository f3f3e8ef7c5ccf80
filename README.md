# rosgraph_zenoh

Building blocks for a ROS 2 middleware that discovers its graph through
Zenoh liveliness tokens. The package builds and parses liveliness key
expressions, encodes QoS profiles into compact strings, holds the records a
graph is made of, keeps QoS event counters with their callbacks, wakes
waiting threads through guard conditions, and serializes the attachment
sent with each message.

It has no third-party dependencies and needs Python 3.10 or later.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `rosgraph_zenoh.qos_keyexpr` — `QosProfile`, the policy enums
  (`ReliabilityPolicy`, `DurabilityPolicy`, `HistoryPolicy`,
  `LivelinessPolicy`) and `Duration`.
  - `qos_to_keyexpr(qos, default)` encodes a profile, leaving out values
    equal to the default profile.
  - `keyexpr_to_qos(keyexpr, default)` decodes one and raises `ValueError`
    when the string is malformed.
  - `check_compatible(publisher_qos, subscription_qos)` returns a
    `QosCompatibility` of `OK`, `WARNING` or `ERROR`.
  - `mangle_name` / `demangle_name` replace `/` with `%` and back.
- `rosgraph_zenoh.entity` — `EntityType`, `NodeInfo`, `TopicInfo` and
  `Entity`.
  - `Entity.create(...)` validates its fields and builds the liveliness key
    expression, GID and key-expression hash.
  - `Entity.from_keyexpr(keyexpr)` parses a key expression back and raises
    `ValueError` when it is invalid.
  - Two entities are equal when their key-expression hashes are equal.
  - `subscription_token(domain_id)` gives the key expression that matches
    every token of a domain.
  - `hash_gid(gid)` hashes a GID to an integer.
- `rosgraph_zenoh.graph_model` — `TopicData` holds the entities on one topic
  name, type and QoS. Its `from_entity(entity)` starts one from an entity.
  `GraphNode` is a node with its publisher, subscription, service and client
  topic maps. The maps are plain nested dicts, from name to type to QoS key
  expression, and they keep insertion order.
- `rosgraph_zenoh.graph_views`:
  - `demangle_if_ros_type` turns `pkg::msg::dds_::Name_` into
    `pkg/msg/Name`.
  - `names_and_types(topic_map)` lists topic names with their demangled
    types.
  - `validate_node_name` / `validate_namespace` raise `ValueError` on
    invalid names.
  - `EndpointType` and `TopicEndpointInfo` describe endpoints.
- `rosgraph_zenoh.events` — `RmwEventType` and `EventType`, with
  `zenoh_event_from_rmw_event` to map from one to the other.
  - `EventStatus` holds the counters of one event.
  - `EventsManager` keeps per-event statuses, callbacks and attached wait
    sets.
  - `DataCallbackManager` reports new data to a user callback. It counts
    arrivals until a callback is set.
- `rosgraph_zenoh.guard_condition` — `GuardCondition` and `WaitSetData`. The
  wait set is a condition variable with a triggered flag.
- `rosgraph_zenoh.attachment` — `AttachmentData` holds the sequence number,
  source timestamp and 16-byte source GID. Use `to_bytes` and `from_bytes`
  to convert it.

## Example

```python
from rosgraph_zenoh.entity import Entity, EntityType, NodeInfo, TopicInfo
from rosgraph_zenoh.graph_model import TopicData
from rosgraph_zenoh.graph_views import names_and_types
from rosgraph_zenoh.qos_keyexpr import QosProfile, qos_to_keyexpr

qos = QosProfile()
node = NodeInfo(0, "/", "talker", "/")
topic = TopicInfo(0, "/chatter", "std_msgs::msg::dds_::String_", "RIHS01_abc", qos)
pub = Entity.create("aa11", "1", "2", EntityType.PUBLISHER, node, topic)

parsed = Entity.from_keyexpr(pub.liveliness_keyexpr)
print(parsed == pub)                  # True

topic_map = {topic.name: {topic.type: {qos_to_keyexpr(qos): TopicData.from_entity(pub)}}}
print(names_and_types(topic_map))     # [('/chatter', ['std_msgs/msg/String'])]
```

## What it does not do

The package does not open a Zenoh session or send or receive anything over
the network. It has no cache that takes in liveliness PUT and DELETE tokens
and answers graph queries such as node lists or publisher counts. Callers
assemble `GraphNode` and `TopicData` records themselves. It has no console
logger and no command-line program.