import pytest

from kubesim.clock import Clock
from kubesim.node import Node, NodeRegistry


@pytest.fixture
def start() -> Clock:
    return Clock.at("2024-01-01T00:00:00+00:00")


@pytest.fixture
def registry() -> NodeRegistry:
    return NodeRegistry([Node("n1", {"cpu": 4}), Node("n2", {"cpu": 2})])
