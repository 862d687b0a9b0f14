"""
Storage interfaces for mediagate.

The core never persists anything itself. Hosts plug in repositories that
load and save whole resource and agent documents.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Callable

from ..core.types import Agent, AgentID, Resource
from ..errors import NotFoundError, StorageError


ResourceFilter = Callable[[Resource], bool]


@dataclass
class StorageStats:
    """Statistics about storage usage."""
    total_resources: int = 0
    total_agents: int = 0
    uptime_seconds: float = 0.0
    operations_count: int = 0
    error_count: int = 0
    last_error_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'total_resources': self.total_resources,
            'total_agents': self.total_agents,
            'uptime_seconds': self.uptime_seconds,
            'operations_count': self.operations_count,
            'error_count': self.error_count,
            'last_error_at': self.last_error_at.isoformat() if self.last_error_at else None,
        }


class ResourceRepository(ABC):
    """Abstract resource document store."""

    @abstractmethod
    async def load(self, resource_id: str) -> Resource:
        """Load a resource. Raises NotFoundError or StorageError."""
        pass

    @abstractmethod
    async def save(self, resource: Resource) -> None:
        """Insert or replace a resource document."""
        pass

    @abstractmethod
    async def delete(self, resource_id: str) -> bool:
        """Delete a resource document and its notes. Returns False if absent."""
        pass

    @abstractmethod
    async def list(self, predicate: Optional[ResourceFilter] = None) -> List[Resource]:
        """List resources matching ``predicate``, newest first."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass


class AgentRepository(ABC):
    """Abstract agent document store. Emails are unique."""

    @abstractmethod
    async def get(self, agent_id: AgentID) -> Agent:
        """Load an agent. Raises NotFoundError or StorageError."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Agent:
        """Load an agent by email. Raises NotFoundError or StorageError."""
        pass

    @abstractmethod
    async def save(self, agent: Agent) -> None:
        """Insert or replace an agent document."""
        pass

    @abstractmethod
    async def list(self) -> List[Agent]:
        """List all agents."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass


__all__ = [
    "ResourceFilter",
    "StorageStats",
    "ResourceRepository",
    "AgentRepository",
    "NotFoundError",
    "StorageError",
]
