"""
Shared fixtures: three agents and a super-agent.

Grants (stored on the owner):
    daniel lets troy read his resources
    troy lets lanny read his resources
    lanny lets daniel read her resources
"""

from datetime import datetime

import pytest

from mediagate.authz.graph import IdentityGraph
from mediagate.authz.policy import Policy
from mediagate.core.types import Agent, AgentID, Resource, ResourceKind


SUDO_EMAIL = "root@example.com"


@pytest.fixture
def daniel():
    return Agent(id=AgentID("daniel"), email="daniel@example.com", can_read=[AgentID("troy")])


@pytest.fixture
def troy():
    return Agent(id=AgentID("troy"), email="troy@example.com", can_read=[AgentID("lanny")])


@pytest.fixture
def lanny():
    return Agent(id=AgentID("lanny"), email="lanny@example.com", can_read=[AgentID("daniel")])


@pytest.fixture
def root():
    return Agent(id=AgentID("root"), email=SUDO_EMAIL)


@pytest.fixture
def agents(daniel, troy, lanny, root):
    return [daniel, troy, lanny, root]


@pytest.fixture
def graph(agents):
    return IdentityGraph(agents)


@pytest.fixture
def policy(graph):
    return Policy(graph, SUDO_EMAIL)


@pytest.fixture
def image(daniel):
    """daniel's unpublished, unflagged image"""
    return Resource(
        id="image1",
        owner=daniel.id,
        kind=ResourceKind.IMAGE,
        path="uploads/example.com/daniel/image1.jpg",
        created_at=datetime(2024, 1, 1, 12, 0, 0),
    )


@pytest.fixture
def track(daniel):
    return Resource(
        id="track1",
        owner=daniel.id,
        kind=ResourceKind.TRACK,
        path="uploads/example.com/daniel/track1.ogg",
        created_at=datetime(2024, 1, 1, 12, 0, 0),
    )
