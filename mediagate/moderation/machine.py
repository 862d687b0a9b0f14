"""
Moderation state machine for mediagate resources.

A resource is ``clean`` while nobody flags it and ``flagged`` otherwise.
Every transition is authorized through the request's Policy first, works on
a copy of the resource and returns the copy on success, so a failed
transition never leaves a half-mutated resource behind.
"""

from datetime import datetime
from typing import Callable, Optional
import logging

from ..authz.policy import Policy
from ..authz.types import Action
from ..core.types import Identity, OperationResult, Resource
from ..errors import ErrorCode


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ModerationStateMachine:
    """
    Flag, deflag, publish and unpublish transitions.
    """

    def __init__(self, policy: Policy, clock: Optional[Clock] = None):
        self.policy = policy
        self.clock = clock or datetime.now

    def _denied(self, operator: Optional[Identity], resource: Resource,
                action: Action) -> Optional[OperationResult]:
        decision = self.policy.authorize(operator, resource, action)
        if decision.allowed:
            return None
        return OperationResult.fail(decision.reason)

    def flag(self, operator: Optional[Identity], resource: Resource) -> OperationResult:
        """
        Add the operator to the resource's flaggers.

        Flagging twice is a successful no-op. An agent whose earlier flag the
        super-agent cleared may not flag the same resource again.
        """
        denied = self._denied(operator, resource, Action.FLAG)
        if denied:
            return denied

        if (operator.id in resource.overruled_flaggers
                and not self.policy.is_super_agent(operator)):
            logger.info(f"{operator.id} tried to re-flag approved resource {resource.id}")
            return OperationResult.fail(ErrorCode.ADMINISTRATIVELY_APPROVED)

        updated = resource.copy()
        if operator.id in updated.flaggers:
            return OperationResult.ok(updated, "Already flagged")

        updated.flaggers.append(operator.id)
        logger.info(f"Resource {resource.id} flagged by {operator.id}")
        return OperationResult.ok(updated, "Resource flagged")

    def deflag(self, operator: Optional[Identity], resource: Resource) -> OperationResult:
        """
        Clear every flagger.

        When the super-agent deflags, the cleared flaggers are remembered as
        overruled. An owner's own deflag leaves no such record.
        """
        denied = self._denied(operator, resource, Action.DEFLAG)
        if denied:
            return denied

        updated = resource.copy()
        if self.policy.is_super_agent(operator):
            for agent_id in updated.flaggers:
                if agent_id not in updated.overruled_flaggers:
                    updated.overruled_flaggers.append(agent_id)
        updated.flaggers = []
        logger.info(f"Resource {resource.id} deflagged by {operator.id}")
        return OperationResult.ok(updated, "Resource deflagged")

    def publish(self, operator: Optional[Identity], resource: Resource) -> OperationResult:
        """Stamp the resource as published now. Flagged resources cannot be published."""
        denied = self._denied(operator, resource, Action.PUBLISH)
        if denied:
            return denied

        if resource.flagged:
            return OperationResult.fail(ErrorCode.FLAGGED, "Flagged resources cannot be published")

        updated = resource.copy()
        if updated.published is None:
            updated.published = self.clock()
            logger.info(f"Resource {resource.id} published by {operator.id}")
        return OperationResult.ok(updated, "Resource published")

    def unpublish(self, operator: Optional[Identity], resource: Resource) -> OperationResult:
        denied = self._denied(operator, resource, Action.UNPUBLISH)
        if denied:
            return denied

        updated = resource.copy()
        updated.published = None
        logger.info(f"Resource {resource.id} unpublished by {operator.id}")
        return OperationResult.ok(updated, "Resource unpublished")

    def toggle_publish(self, operator: Optional[Identity], resource: Resource) -> OperationResult:
        if resource.is_published:
            return self.unpublish(operator, resource)
        return self.publish(operator, resource)
