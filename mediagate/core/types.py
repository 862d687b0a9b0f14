"""
Core types and data structures for mediagate.

Agents own media resources (images and audio tracks), grant read access to
other agents, and flag, like, publish and annotate resources.
"""

from datetime import datetime
from typing import List, Optional, Dict, Any, NewType
from dataclasses import dataclass, field
from enum import Enum
import uuid

from ..errors import ErrorCode, error_for, message_for


AgentID = NewType("AgentID", str)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class ResourceKind(Enum):
    """Kinds of media resource sharing the moderation core"""
    IMAGE = "image"
    TRACK = "track"


@dataclass(frozen=True)
class Identity:
    """Authenticated operator, as handed over by the login collaborator"""
    id: AgentID
    email: str


@dataclass
class Agent:
    """
    Identity that owns resources.

    ``can_read`` lists the agents this agent allows to view its resources.
    The grant lives on the owner, so ``owner.can_read`` containing ``viewer``
    is what lets ``viewer`` in.
    """
    id: AgentID
    email: str
    can_read: List[AgentID] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def identity(self) -> Identity:
        return Identity(id=self.id, email=self.email)

    @property
    def directory(self) -> str:
        """Media directory for this agent, e.g. ``example.com/daniel``"""
        local, _, domain = self.email.partition("@")
        return f"{domain}/{local}"

    def grant(self, viewer: AgentID) -> bool:
        """Allow ``viewer`` to read this agent's resources. Returns True if added."""
        if viewer == self.id or viewer in self.can_read:
            return False
        self.can_read.append(viewer)
        return True

    def revoke(self, viewer: AgentID) -> bool:
        """Withdraw a read grant. Returns True if one was removed."""
        if viewer not in self.can_read:
            return False
        self.can_read = [a for a in self.can_read if a != viewer]
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'email': self.email,
            'can_read': list(self.can_read),
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Agent':
        return cls(
            id=AgentID(data['id']),
            email=data['email'],
            can_read=[AgentID(a) for a in data.get('can_read', [])],
            created_at=_parse_time(data.get('created_at')) or datetime.now(),
        )


@dataclass
class Note:
    """Text annotation attached to exactly one resource"""
    author: AgentID
    text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'author': self.author,
            'text': self.text,
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Note':
        return cls(
            id=data['id'],
            author=AgentID(data['author']),
            text=data['text'],
            created_at=_parse_time(data.get('created_at')) or datetime.now(),
        )


@dataclass
class Resource:
    """
    An uploaded image or track.

    ``flagged`` is derived from ``flaggers`` and cannot be assigned.
    ``overruled_flaggers`` remembers whose flags the super-agent cleared;
    those agents may not flag the resource again.
    """
    id: str
    owner: AgentID
    kind: ResourceKind = ResourceKind.IMAGE
    path: str = ""
    flaggers: List[AgentID] = field(default_factory=list)
    overruled_flaggers: List[AgentID] = field(default_factory=list)
    published: Optional[datetime] = None
    likes: List[AgentID] = field(default_factory=list)
    notes: List[Note] = field(default_factory=list)
    name: str = ""
    transcription: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def flagged(self) -> bool:
        return len(self.flaggers) > 0

    @property
    def is_published(self) -> bool:
        return self.published is not None

    @property
    def administratively_approved(self) -> bool:
        return len(self.overruled_flaggers) > 0

    @property
    def engagement_count(self) -> int:
        """Likes plus notes, as shown next to a resource"""
        return len(self.likes) + len(self.notes)

    def find_note(self, note_id: str) -> Optional[Note]:
        return next((n for n in self.notes if n.id == note_id), None)

    def copy(self) -> 'Resource':
        """Copy whose lists can be mutated without touching this resource."""
        return Resource(
            id=self.id,
            owner=self.owner,
            kind=self.kind,
            path=self.path,
            flaggers=list(self.flaggers),
            overruled_flaggers=list(self.overruled_flaggers),
            published=self.published,
            likes=list(self.likes),
            notes=[Note(author=n.author, text=n.text, id=n.id, created_at=n.created_at)
                   for n in self.notes],
            name=self.name,
            transcription=self.transcription,
            created_at=self.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'owner': self.owner,
            'kind': self.kind.value,
            'path': self.path,
            'flagged': self.flagged,
            'flaggers': list(self.flaggers),
            'overruled_flaggers': list(self.overruled_flaggers),
            'published': self.published.isoformat() if self.published else None,
            'likes': list(self.likes),
            'notes': [n.to_dict() for n in self.notes],
            'name': self.name,
            'transcription': self.transcription,
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Resource':
        # 'flagged' is ignored on input, it always follows 'flaggers'
        return cls(
            id=data['id'],
            owner=AgentID(data['owner']),
            kind=ResourceKind(data.get('kind', ResourceKind.IMAGE.value)),
            path=data.get('path', ''),
            flaggers=[AgentID(a) for a in dict.fromkeys(data.get('flaggers', []))],
            overruled_flaggers=[AgentID(a) for a in data.get('overruled_flaggers', [])],
            published=_parse_time(data.get('published')),
            likes=[AgentID(a) for a in dict.fromkeys(data.get('likes', []))],
            notes=[Note.from_dict(n) for n in data.get('notes', [])],
            name=data.get('name', ''),
            transcription=data.get('transcription', ''),
            created_at=_parse_time(data.get('created_at')) or datetime.now(),
        )


@dataclass
class Page:
    """One page of a resource listing"""
    items: List[Resource]
    page: int = 1
    next_page: int = 0
    prev_page: int = 0


@dataclass
class OperationResult:
    """
    Outcome of a state transition or listing.

    On success ``resource`` (or ``page``/``items``) holds the new state; on
    failure ``reason`` says why and the stored state is unchanged.
    """
    success: bool
    resource: Optional[Resource] = None
    reason: Optional[ErrorCode] = None
    message: Optional[str] = None
    advisories: List[str] = field(default_factory=list)
    page: Optional[Page] = None
    items: List[Any] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def ok(cls, resource: Optional[Resource] = None, message: Optional[str] = None,
           **kwargs) -> 'OperationResult':
        return cls(success=True, resource=resource, message=message, **kwargs)

    @classmethod
    def fail(cls, reason: ErrorCode, message: Optional[str] = None,
             **kwargs) -> 'OperationResult':
        return cls(success=False, reason=reason, message=message or message_for(reason), **kwargs)

    def raise_for_failure(self) -> 'OperationResult':
        """Return self on success, otherwise raise the matching MediaGateError."""
        if self.success:
            return self
        raise error_for(self.reason, self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'resource': self.resource.to_dict() if self.resource else None,
            'reason': self.reason.value if self.reason else None,
            'message': self.message,
            'advisories': list(self.advisories),
            'timestamp': self.timestamp.isoformat(),
        }
