"""
Audit trail for mediagate.

Every facade operation records who asked for what on which resource and
how it was decided, allowed or not.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from datetime import datetime
from collections import deque
import asyncio
import json
import logging
import uuid

import aiofiles


logger = logging.getLogger(__name__)


@dataclass
class AuditEvent:
    """One recorded operation"""
    event_type: str  # e.g. "flag", "view", "list_flagged"
    agent_id: Optional[str] = None  # None for anonymous operators
    resource: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "agent_id": self.agent_id,
            "resource": self.resource,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        return cls(
            event_id=data["event_id"],
            event_type=data["event_type"],
            agent_id=data.get("agent_id"),
            resource=data.get("resource"),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            details=data.get("details", {}),
        )

    def matches(
        self,
        agent_id: Optional[str] = None,
        event_type: Optional[str] = None,
        resource: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> bool:
        if agent_id and self.agent_id != agent_id:
            return False
        if event_type and self.event_type != event_type:
            return False
        if resource and self.resource != resource:
            return False
        if start_time and self.timestamp < start_time:
            return False
        if end_time and self.timestamp > end_time:
            return False
        return True


class AuditLogger(ABC):
    """Abstract base class for audit logging"""

    @abstractmethod
    async def log(self, event: AuditEvent) -> None:
        """Log an audit event"""
        pass

    @abstractmethod
    async def get_events(
        self,
        agent_id: Optional[str] = None,
        event_type: Optional[str] = None,
        resource: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        pass

    async def close(self) -> None:
        """Close the audit logger and release resources"""
        pass


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        async with self._lock:
            self.events.append(event)

    async def get_events(
        self,
        agent_id: Optional[str] = None,
        event_type: Optional[str] = None,
        resource: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        async with self._lock:
            return [
                event for event in self.events
                if event.matches(agent_id, event_type, resource, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """Audit logger appending JSON lines to a file"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        async with self._lock:
            async with aiofiles.open(self.file_path, "a", encoding="utf-8") as f:
                await f.write(json.dumps(event.to_dict()) + "\n")

    async def get_events(
        self,
        agent_id: Optional[str] = None,
        event_type: Optional[str] = None,
        resource: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        events = []

        try:
            async with aiofiles.open(self.file_path, "r", encoding="utf-8") as f:
                async for line in f:
                    if not line.strip():
                        continue
                    try:
                        event = AuditEvent.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, ValueError) as e:
                        logger.warning(f"Skipping malformed audit line: {e}")
                        continue

                    if event.matches(agent_id, event_type, resource, start_time, end_time):
                        events.append(event)

        except FileNotFoundError:
            pass

        return events


def create_audit_logger(logger_type: str = "memory", **kwargs) -> AuditLogger:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("memory" or "file")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance
    """
    if logger_type == "memory":
        return MemoryAuditLogger(kwargs.get("max_entries", 1000))
    elif logger_type == "file":
        return FileAuditLogger(kwargs.get("file_path", "audit.log"))
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
