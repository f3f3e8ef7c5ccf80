[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rosgraph_zenoh"
version = "0.1.0"
description = "Liveliness key expressions, QoS encoding, graph records and event bookkeeping for a Zenoh-based ROS 2 middleware"
requires-python = ">=3.10"
dependencies = []
keywords = ["ros2", "zenoh", "liveliness", "qos", "middleware", "events"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rosgraph_zenoh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
