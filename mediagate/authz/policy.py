"""
Authorization policy for mediagate.

A Policy is built per request with the super-agent email resolved once, so
a change to the process-wide setting applies from the next request on and
never halfway through one. Rules are evaluated in order and the first match
wins:

1. anonymous operators may only view published, unflagged resources
2. the super-agent may do anything
3. the owner may do anything, except deflag once the super-agent has ruled
4. agents granted read access may view, like, flag and annotate unflagged resources
5. flagged resources are hidden from everyone else
6. published resources may be viewed, liked, flagged and annotated by any agent
7. everything else is forbidden
"""

from typing import Optional
import logging

from ..core.types import Identity, Note, Resource, AgentID
from ..errors import ErrorCode
from .graph import IdentityGraph
from .types import Action, Advisory, Decision, READER_ACTIONS


logger = logging.getLogger(__name__)


class Policy:
    """
    Decides whether an operator may perform an action on a resource.
    """

    def __init__(self, graph: IdentityGraph, super_agent_email: Optional[str] = None):
        self.graph = graph
        self.super_agent_email = super_agent_email or None

    def is_super_agent(self, operator: Optional[Identity]) -> bool:
        if operator is None or self.super_agent_email is None:
            return False
        return operator.email == self.super_agent_email

    def can_view(self, viewer: AgentID, owner: AgentID) -> bool:
        return self.graph.can_view(viewer, owner)

    def authorize(self, operator: Optional[Identity], resource: Resource,
                  action: Action, note: Optional[Note] = None) -> Decision:
        """
        Determine if an operator can perform an action on a resource.

        Args:
            operator: The authenticated operator, or None when anonymous
            resource: The target resource
            action: The operation to be performed
            note: The target note, for DELETE_NOTE only

        Returns:
            Decision: allow, or deny with a reason
        """
        decision = self._evaluate(operator, resource, action, note)
        if not decision.allowed:
            logger.info(
                f"Denied {action.value} on {resource.id} for "
                f"{operator.id if operator else 'anonymous'}: {decision.reason.value} ({decision.rule})"
            )
        return decision

    def _evaluate(self, operator: Optional[Identity], resource: Resource,
                  action: Action, note: Optional[Note]) -> Decision:
        if operator is None:
            return self._anonymous(resource, action)

        if action is Action.DELETE_NOTE:
            return self.authorize_note_deletion(operator, resource, note)

        flagged_advisory = [Advisory.FLAGGED] if resource.flagged else []

        if self.is_super_agent(operator):
            return Decision.allow(action, "super_agent",
                                  flagged_advisory if action is Action.VIEW else None)

        if operator.id == resource.owner:
            if action is Action.DEFLAG and resource.administratively_approved:
                return Decision.deny(action, ErrorCode.ADMINISTRATIVELY_APPROVED, "owner")
            return Decision.allow(action, "owner",
                                  flagged_advisory if action is Action.VIEW else None)

        granted = self.graph.can_view(operator.id, resource.owner)

        if granted and not resource.flagged:
            if action in READER_ACTIONS:
                return Decision.allow(action, "reader")
            return Decision.deny(action, ErrorCode.FORBIDDEN, "reader")

        if resource.flagged:
            visible = granted or resource.is_published
            # Reporting stays open to anyone who could otherwise see it, so
            # a repeated flag is answered by the state machine, not hidden here
            if action is Action.FLAG and visible:
                return Decision.allow(action, "flagged")
            if action is Action.VIEW or (visible and action in READER_ACTIONS):
                return Decision.deny(action, ErrorCode.FLAGGED, "flagged")
            return Decision.deny(action, ErrorCode.FORBIDDEN, "flagged")

        if resource.is_published:
            if action in READER_ACTIONS:
                return Decision.allow(action, "published")
            return Decision.deny(action, ErrorCode.FORBIDDEN, "published")

        return Decision.deny(action, ErrorCode.FORBIDDEN, "default")

    def _anonymous(self, resource: Resource, action: Action) -> Decision:
        if action is not Action.VIEW:
            return Decision.deny(action, ErrorCode.UNAUTHENTICATED, "anonymous")
        if not resource.is_published:
            return Decision.deny(action, ErrorCode.UNAUTHENTICATED, "anonymous")
        if resource.flagged:
            return Decision.deny(action, ErrorCode.FLAGGED, "anonymous")
        return Decision.allow(action, "anonymous")

    def authorize_note_deletion(self, operator: Optional[Identity], resource: Resource,
                                note: Optional[Note]) -> Decision:
        """Super-agent, note author or resource owner may delete a note."""
        action = Action.DELETE_NOTE
        if operator is None:
            return Decision.deny(action, ErrorCode.UNAUTHENTICATED, "anonymous")
        if note is None or resource.find_note(note.id) is None:
            return Decision.deny(action, ErrorCode.NOT_FOUND, "note")
        if self.is_super_agent(operator):
            return Decision.allow(action, "super_agent")
        if operator.id == note.author:
            return Decision.allow(action, "note_author")
        if operator.id == resource.owner:
            return Decision.allow(action, "owner")
        return Decision.deny(action, ErrorCode.FORBIDDEN, "note")

    def authorize_privileged(self, operator: Optional[Identity]) -> Decision:
        """Gate for super-agent-only views such as the flagged listing."""
        if operator is None:
            return Decision.deny(Action.VIEW, ErrorCode.UNAUTHENTICATED, "anonymous")
        if self.is_super_agent(operator):
            return Decision.allow(Action.VIEW, "super_agent")
        return Decision.deny(Action.VIEW, ErrorCode.FORBIDDEN, "privileged")

    def authorize_album(self, operator: Optional[Identity], owner: AgentID) -> Decision:
        """Gate for listing one owner's resources."""
        if operator is None:
            return Decision.deny(Action.VIEW, ErrorCode.UNAUTHENTICATED, "anonymous")
        if self.is_super_agent(operator):
            return Decision.allow(Action.VIEW, "super_agent")
        if self.graph.can_view(operator.id, owner):
            return Decision.allow(Action.VIEW, "owner" if operator.id == owner else "reader")
        return Decision.deny(Action.VIEW, ErrorCode.FORBIDDEN, "album")

    def sees_flagged(self, operator: Optional[Identity], owner: AgentID) -> bool:
        """Whether flagged items appear in a listing of ``owner``'s resources."""
        if operator is None:
            return False
        return self.is_super_agent(operator) or operator.id == owner
