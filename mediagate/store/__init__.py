"""
Repository interfaces and in-memory implementations.
"""

from .types import AgentRepository, ResourceRepository, StorageStats
from .memory import MemoryAgentRepository, MemoryResourceRepository

__all__ = [
    "AgentRepository",
    "ResourceRepository",
    "StorageStats",
    "MemoryAgentRepository",
    "MemoryResourceRepository",
]
