"""Liveliness key expressions, QoS encoding, graph records, events and guard conditions for a Zenoh-based ROS 2 middleware."""

__version__ = "0.1.0"