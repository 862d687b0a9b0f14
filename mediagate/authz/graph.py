"""
Identity graph: who may read whose resources.

Grants are directed and resolved one hop only. An owner lists, in its own
``can_read``, the agents allowed to see its resources. Nothing is symmetric
or transitive, and a viewer listing an owner in the viewer's own
``can_read`` grants the viewer nothing.
"""

from typing import Dict, Iterable, List, Optional, Set
import logging

from ..core.types import Agent, AgentID


logger = logging.getLogger(__name__)


class IdentityGraph:
    """
    Read-grant lookup over a set of known agents.
    """

    def __init__(self, agents: Optional[Iterable[Agent]] = None):
        self._grants: Dict[AgentID, Set[AgentID]] = {}
        for agent in agents or []:
            self.add(agent)

    def add(self, agent: Agent) -> None:
        """Register (or refresh) an agent's outgoing grants."""
        self._grants[agent.id] = set(agent.can_read)

    def __contains__(self, agent_id: AgentID) -> bool:
        return agent_id in self._grants

    def can_view(self, viewer: AgentID, owner: AgentID) -> bool:
        """
        Check whether ``viewer`` may read resources owned by ``owner``.

        Args:
            viewer: The agent asking to see the resource
            owner: The agent who owns the resource

        Returns:
            bool: True if viewer is the owner or the owner granted the viewer access
        """
        if viewer == owner:
            return True
        granted = self._grants.get(owner)
        if granted is None:
            logger.debug(f"No grants known for owner {owner}")
            return False
        return viewer in granted

    def readables(self, viewer: AgentID) -> List[AgentID]:
        """Owners whose resources ``viewer`` may read, the viewer first."""
        owners = [viewer]
        owners.extend(
            owner for owner, granted in self._grants.items()
            if owner != viewer and viewer in granted
        )
        return owners
