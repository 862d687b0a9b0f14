"""
In-memory repositories for mediagate.
Suitable for development, testing and single-instance deployments.
"""

from typing import Dict, List, Optional
import threading
import time

from ..core.types import Agent, AgentID, Resource
from ..errors import NotFoundError, StorageError
from .types import AgentRepository, ResourceFilter, ResourceRepository, StorageStats


class MemoryResourceRepository(ResourceRepository):
    """
    Dict-backed resource store.

    Documents are copied on the way in and out, so callers can only change
    stored state through ``save``. Last writer wins.

    Note: All data is lost when the process terminates.
    """

    def __init__(self):
        self._resources: Dict[str, Resource] = {}
        self._lock = threading.RLock()
        self._start_time = time.time()
        self._operations_count = 0
        self._error_count = 0

    async def load(self, resource_id: str) -> Resource:
        with self._lock:
            self._operations_count += 1
            resource = self._resources.get(resource_id)
            if resource is None:
                raise NotFoundError(f"Resource not found: {resource_id}", key=resource_id)
            return resource.copy()

    async def save(self, resource: Resource) -> None:
        with self._lock:
            if not resource.id:
                self._error_count += 1
                raise StorageError("Resource has no id", operation="save")
            self._resources[resource.id] = resource.copy()
            self._operations_count += 1

    async def delete(self, resource_id: str) -> bool:
        with self._lock:
            self._operations_count += 1
            return self._resources.pop(resource_id, None) is not None

    async def list(self, predicate: Optional[ResourceFilter] = None) -> List[Resource]:
        with self._lock:
            self._operations_count += 1
            resources = [
                r.copy() for r in self._resources.values()
                if predicate is None or predicate(r)
            ]
        resources.sort(key=lambda r: r.created_at, reverse=True)
        return resources

    async def get_stats(self) -> StorageStats:
        with self._lock:
            return StorageStats(
                total_resources=len(self._resources),
                uptime_seconds=time.time() - self._start_time,
                operations_count=self._operations_count,
                error_count=self._error_count,
            )

    async def clear(self) -> None:
        with self._lock:
            self._resources.clear()


class MemoryAgentRepository(AgentRepository):
    """
    Dict-backed agent store with a unique email index.
    """

    def __init__(self):
        self._agents: Dict[AgentID, Agent] = {}
        self._by_email: Dict[str, AgentID] = {}
        self._lock = threading.RLock()
        self._operations_count = 0
        self._error_count = 0

    @staticmethod
    def _copy(agent: Agent) -> Agent:
        return Agent(id=agent.id, email=agent.email,
                     can_read=list(agent.can_read), created_at=agent.created_at)

    async def get(self, agent_id: AgentID) -> Agent:
        with self._lock:
            self._operations_count += 1
            agent = self._agents.get(agent_id)
            if agent is None:
                raise NotFoundError(f"Agent not found: {agent_id}", key=agent_id)
            return self._copy(agent)

    async def get_by_email(self, email: str) -> Agent:
        with self._lock:
            agent_id = self._by_email.get(email.strip().lower())
            if agent_id is None:
                raise NotFoundError(f"No agent registered for {email}", key=email)
            return await self.get(agent_id)

    async def save(self, agent: Agent) -> None:
        email = agent.email.strip().lower() if agent.email else ""
        with self._lock:
            if not email:
                self._error_count += 1
                raise StorageError("No email supplied", operation="save", key=agent.id)
            owner = self._by_email.get(email)
            if owner is not None and owner != agent.id:
                self._error_count += 1
                raise StorageError("That email is already registered", operation="save", key=email)

            previous = self._agents.get(agent.id)
            if previous is not None:
                self._by_email.pop(previous.email.strip().lower(), None)
            self._agents[agent.id] = self._copy(agent)
            self._by_email[email] = agent.id
            self._operations_count += 1

    async def list(self) -> List[Agent]:
        with self._lock:
            self._operations_count += 1
            agents = [self._copy(a) for a in self._agents.values()]
        agents.sort(key=lambda a: a.created_at, reverse=True)
        return agents

    async def get_stats(self) -> StorageStats:
        with self._lock:
            return StorageStats(
                total_agents=len(self._agents),
                operations_count=self._operations_count,
                error_count=self._error_count,
            )
