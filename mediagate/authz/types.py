"""
Authorization types for mediagate.
Actions an operator can request on a resource and the decisions returned.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any

from ..errors import ErrorCode, message_for


class Action(Enum):
    """Operation requested on a resource"""
    VIEW = "view"
    LIKE = "like"
    FLAG = "flag"
    DEFLAG = "deflag"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"
    DELETE = "delete"
    EDIT_METADATA = "edit_metadata"
    ADD_NOTE = "add_note"
    DELETE_NOTE = "delete_note"


# Actions any agent who can see a resource may take
READER_ACTIONS = frozenset({Action.VIEW, Action.LIKE, Action.FLAG, Action.ADD_NOTE})


class Advisory(str, Enum):
    """Non-blocking signals attached to an allowed decision or result"""
    FLAGGED = "flagged"
    MEDIA_RETAINED = "media_retained"  # resource deleted, backing file could not be removed

    def __str__(self) -> str:
        return self.value


@dataclass
class Decision:
    """
    Authorization decision, with the rule that produced it.
    """
    allowed: bool
    action: Action
    reason: Optional[ErrorCode] = None
    rule: Optional[str] = None
    advisories: List[Advisory] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def allow(cls, action: Action, rule: str,
              advisories: Optional[List[Advisory]] = None) -> 'Decision':
        return cls(allowed=True, action=action, rule=rule, advisories=advisories or [])

    @classmethod
    def deny(cls, action: Action, reason: ErrorCode, rule: str) -> 'Decision':
        return cls(allowed=False, action=action, reason=reason, rule=rule)

    @property
    def message(self) -> Optional[str]:
        return message_for(self.reason) if self.reason else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'allowed': self.allowed,
            'action': self.action.value,
            'reason': self.reason.value if self.reason else None,
            'rule': self.rule,
            'advisories': [a.value for a in self.advisories],
            'timestamp': self.timestamp.isoformat(),
        }
