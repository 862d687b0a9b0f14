"""
Main mediagate facade.

Each operation follows the same read-modify-write shape: load the resource
from the repository, build a Policy for this request (resolving the
super-agent once), authorize, apply the state transition, save, and record
an audit event. Failures come back as OperationResult values; repository
errors are reported as ``not_found`` / ``storage_error`` and never retried.
"""

from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional
import logging
import uuid

from .config import Config, EnvSuperAgentSetting, SuperAgentSetting
from .types import AgentID, Identity, OperationResult, Page, Resource, ResourceKind
from ..audit.logger import AuditEvent, AuditLogger, MemoryAuditLogger, FileAuditLogger
from ..authz.graph import IdentityGraph
from ..authz.policy import Policy
from ..authz.types import Action, Advisory
from ..engagement.likes import toggle_like
from ..errors import ErrorCode, NotFoundError, StorageError
from ..media.store import FileMediaStore, MediaStore, MemoryMediaStore
from ..moderation.machine import Clock, ModerationStateMachine
from ..notes.notes import add_note, remove_note
from ..store.memory import MemoryAgentRepository, MemoryResourceRepository
from ..store.types import AgentRepository, ResourceRepository


Transition = Callable[[Policy, Resource], OperationResult]

# Metadata fields each resource kind carries
EDITABLE_FIELDS = {
    ResourceKind.IMAGE: ("name",),
    ResourceKind.TRACK: ("name", "transcription"),
}


def paginate(resources: List[Resource], page: int, page_size: int) -> Page:
    """Slice a newest-first listing into a numbered page (pages start at 1)."""
    page = max(page, 1)
    start = page_size * (page - 1)
    items = resources[start:start + page_size]
    next_page = page + 1 if len(resources) > page_size * page else 0
    return Page(items=items, page=page, next_page=next_page, prev_page=page - 1)


class MediaGate:
    """
    Authorization and moderation core for shared images and tracks.
    Use MediaGate.new() to construct an instance.
    """

    def __init__(
        self,
        config: Config,
        resources: ResourceRepository,
        agents: AgentRepository,
        super_agent: Optional[SuperAgentSetting] = None,
        media: Optional[MediaStore] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config
        self.resources = resources
        self.agents = agents
        self.super_agent = super_agent or EnvSuperAgentSetting()
        self.media = media or MemoryMediaStore()
        self.audit_logger = audit_logger or MemoryAuditLogger(max_entries=1000)
        self.clock = clock or datetime.now
        self.logger = logging.getLogger(__name__)

    @classmethod
    def new(
        cls,
        config: Optional[Config] = None,
        resources: Optional[ResourceRepository] = None,
        agents: Optional[AgentRepository] = None,
        super_agent: Optional[SuperAgentSetting] = None,
        media: Optional[MediaStore] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Clock] = None,
    ) -> "MediaGate":
        """
        Create a MediaGate with defaults for any collaborator not given.

        Media files live under ``config.upload_root`` and the audit trail goes
        to ``config.audit_log_path`` when set; repositories default to memory.

        Raises:
            ValueError: If configuration is invalid

        Example:
            gate = MediaGate.new(Config.from_env(), super_agent=StaticSuperAgentSetting("root@example.com"))
        """
        config = config or Config.from_env()
        config.validate()
        if audit_logger is None and config.audit_log_path:
            audit_logger = FileAuditLogger(config.audit_log_path)
        if media is None:
            media = FileMediaStore(config.upload_root)
        return cls(
            config,
            resources or MemoryResourceRepository(),
            agents or MemoryAgentRepository(),
            super_agent=super_agent,
            media=media,
            audit_logger=audit_logger,
            clock=clock,
        )

    async def _policy_for(self, owners: Iterable[AgentID] = ()) -> Policy:
        """Policy for one request, with the super-agent read fresh."""
        graph = IdentityGraph()
        for owner_id in owners:
            try:
                graph.add(await self.agents.get(owner_id))
            except NotFoundError:
                self.logger.warning(f"Resource owner {owner_id} is not a known agent")
        return Policy(graph, self.super_agent.current())

    async def _audit(self, event_type: str, operator: Optional[Identity],
                     resource_id: Optional[str], result: OperationResult) -> None:
        try:
            await self.audit_logger.log(AuditEvent(
                event_type=event_type,
                agent_id=operator.id if operator else None,
                resource=resource_id,
                details={
                    "success": result.success,
                    "reason": result.reason.value if result.reason else None,
                    "advisories": [str(a) for a in result.advisories],
                },
            ))
        except OSError as e:
            self.logger.error(f"Failed to write audit event for {event_type}: {e}")

    async def _run(self, event_type: str, operator: Optional[Identity],
                   resource_id: str, transition: Transition, persist: bool = True) -> OperationResult:
        try:
            resource = await self.resources.load(resource_id)
            policy = await self._policy_for([resource.owner])
            result = transition(policy, resource)
            if result.success and persist:
                await self.resources.save(result.resource)
        except NotFoundError as e:
            result = OperationResult.fail(ErrorCode.NOT_FOUND, e.message)
        except StorageError as e:
            self.logger.error(f"{event_type} on {resource_id} failed in storage: {e}")
            result = OperationResult.fail(ErrorCode.STORAGE_ERROR, e.message)

        await self._audit(event_type, operator, resource_id, result)
        return result

    @staticmethod
    def _gated(operator: Optional[Identity], action: Action,
               apply: Callable[[Resource], OperationResult]) -> Transition:
        def transition(policy: Policy, resource: Resource) -> OperationResult:
            decision = policy.authorize(operator, resource, action)
            if not decision.allowed:
                return OperationResult.fail(decision.reason)
            return apply(resource)
        return transition

    # Upload bookkeeping

    async def register_upload(self, operator: Optional[Identity], kind: ResourceKind,
                              path: str, name: str = "") -> OperationResult:
        """Record a resource for a media file the upload layer has stored."""
        if operator is None:
            result = OperationResult.fail(ErrorCode.UNAUTHENTICATED)
            await self._audit("upload", operator, None, result)
            return result

        resource = Resource(id=uuid.uuid4().hex, owner=operator.id, kind=kind,
                            path=path, name=name.strip(), created_at=self.clock())
        try:
            self.media.check_path(path)
            await self.resources.save(resource)
            result = OperationResult.ok(resource, "Resource received")
        except StorageError as e:
            self.logger.error(f"Failed to record upload {path}: {e}")
            result = OperationResult.fail(ErrorCode.STORAGE_ERROR, e.message)

        await self._audit("upload", operator, resource.id, result)
        return result

    # Viewing

    async def view(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        """
        Return the resource if the operator may see it.

        Owners and the super-agent get a flagged resource back with a
        ``flagged`` advisory; everyone else is denied with ``flagged``.
        """
        def transition(policy: Policy, resource: Resource) -> OperationResult:
            decision = policy.authorize(operator, resource, Action.VIEW)
            if not decision.allowed:
                return OperationResult.fail(decision.reason)
            return OperationResult.ok(resource, advisories=list(decision.advisories))

        return await self._run("view", operator, resource_id, transition, persist=False)

    async def authorize(self, operator: Optional[Identity], resource_id: str,
                        action: Action) -> OperationResult:
        """Report the decision for an action without performing it."""
        return await self._run(
            f"authorize:{action.value}", operator, resource_id,
            self._gated(operator, action, lambda r: OperationResult.ok(r)),
            persist=False,
        )

    # Moderation

    async def flag(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        return await self._run(
            "flag", operator, resource_id,
            lambda policy, r: ModerationStateMachine(policy, self.clock).flag(operator, r),
        )

    async def deflag(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        return await self._run(
            "deflag", operator, resource_id,
            lambda policy, r: ModerationStateMachine(policy, self.clock).deflag(operator, r),
        )

    async def publish(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        return await self._run(
            "publish", operator, resource_id,
            lambda policy, r: ModerationStateMachine(policy, self.clock).publish(operator, r),
        )

    async def unpublish(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        return await self._run(
            "unpublish", operator, resource_id,
            lambda policy, r: ModerationStateMachine(policy, self.clock).unpublish(operator, r),
        )

    async def toggle_publish(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        return await self._run(
            "toggle_publish", operator, resource_id,
            lambda policy, r: ModerationStateMachine(policy, self.clock).toggle_publish(operator, r),
        )

    # Engagement and notes

    async def toggle_like(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        return await self._run(
            "like", operator, resource_id,
            self._gated(operator, Action.LIKE,
                        lambda r: OperationResult.ok(toggle_like(operator.id, r))),
        )

    async def add_note(self, operator: Optional[Identity], resource_id: str,
                       text: Optional[str]) -> OperationResult:
        return await self._run(
            "add_note", operator, resource_id,
            self._gated(operator, Action.ADD_NOTE,
                        lambda r: add_note(r, operator.id, text, self.config.max_note_length)),
        )

    async def delete_note(self, operator: Optional[Identity], resource_id: str,
                          note_id: str) -> OperationResult:
        def transition(policy: Policy, resource: Resource) -> OperationResult:
            note = resource.find_note(note_id)
            decision = policy.authorize(operator, resource, Action.DELETE_NOTE, note)
            if not decision.allowed:
                return OperationResult.fail(decision.reason)
            return remove_note(resource, note_id)

        return await self._run("delete_note", operator, resource_id, transition)

    # Owner maintenance

    async def edit_metadata(self, operator: Optional[Identity], resource_id: str,
                            **fields: Any) -> OperationResult:
        """Set ``name`` (any kind) or ``transcription`` (tracks) on a resource."""
        def apply(resource: Resource) -> OperationResult:
            allowed = EDITABLE_FIELDS[resource.kind]
            limits = {
                "name": self.config.max_name_length,
                "transcription": self.config.max_transcription_length,
            }
            updated = resource.copy()
            for key, value in fields.items():
                if key not in allowed or not isinstance(value, str):
                    return OperationResult.fail(ErrorCode.INVALID_METADATA,
                                                f"Cannot set {key} on {resource.kind.value}")
                value = value.strip()
                if len(value) > limits[key]:
                    return OperationResult.fail(
                        ErrorCode.TEXT_TOO_LONG,
                        f"That {key} is too long (max {limits[key]} characters)")
                setattr(updated, key, value)
            return OperationResult.ok(updated, "Resource updated")

        return await self._run("edit_metadata", operator, resource_id,
                               self._gated(operator, Action.EDIT_METADATA, apply))

    async def delete(self, operator: Optional[Identity], resource_id: str) -> OperationResult:
        """
        Delete a resource, its notes and its backing media file.

        The media path is checked before anything is removed. Once the
        document is gone the call succeeds; a media file that cannot be
        removed afterwards is reported with a ``media_retained`` advisory.
        """
        try:
            resource = await self.resources.load(resource_id)
            policy = await self._policy_for([resource.owner])
            decision = policy.authorize(operator, resource, Action.DELETE)
            if not decision.allowed:
                result = OperationResult.fail(decision.reason)
            else:
                if resource.path:
                    self.media.check_path(resource.path)
                await self.resources.delete(resource_id)
                result = OperationResult.ok(resource, "Resource deleted",
                                            advisories=await self._remove_media(resource))
        except NotFoundError as e:
            result = OperationResult.fail(ErrorCode.NOT_FOUND, e.message)
        except StorageError as e:
            self.logger.error(f"delete of {resource_id} failed in storage: {e}")
            result = OperationResult.fail(ErrorCode.STORAGE_ERROR, e.message)

        await self._audit("delete", operator, resource_id, result)
        return result

    async def _remove_media(self, resource: Resource) -> List[Advisory]:
        if not resource.path:
            return []
        try:
            if not await self.media.remove(resource.path):
                self.logger.warning(f"No media file for deleted resource {resource.id}: {resource.path}")
        except StorageError as e:
            self.logger.error(f"Resource {resource.id} deleted but its media file was kept: {e}")
            return [Advisory.MEDIA_RETAINED]
        return []

    # Listings

    async def _list(self, event_type: str, operator: Optional[Identity],
                    fetch: Callable[[], Any]) -> OperationResult:
        try:
            result = await fetch()
        except NotFoundError as e:
            result = OperationResult.fail(ErrorCode.NOT_FOUND, e.message)
        except StorageError as e:
            self.logger.error(f"{event_type} failed in storage: {e}")
            result = OperationResult.fail(ErrorCode.STORAGE_ERROR, e.message)
        await self._audit(event_type, operator, None, result)
        return result

    async def list_flagged(self, operator: Optional[Identity]) -> OperationResult:
        """All flagged resources. Super-agent only."""
        async def fetch() -> OperationResult:
            decision = (await self._policy_for()).authorize_privileged(operator)
            if not decision.allowed:
                return OperationResult.fail(decision.reason)
            return OperationResult.ok(items=await self.resources.list(lambda r: r.flagged))

        return await self._list("list_flagged", operator, fetch)

    async def list_published(self, operator: Optional[Identity], page: int = 1) -> OperationResult:
        """Published, unflagged resources, most recently published first."""
        async def fetch() -> OperationResult:
            published = await self.resources.list(lambda r: r.is_published and not r.flagged)
            published.sort(key=lambda r: r.published, reverse=True)
            listing = paginate(published, page, self.config.page_size)
            return OperationResult.ok(page=listing, items=listing.items)

        return await self._list("list_published", operator, fetch)

    async def list_album(self, operator: Optional[Identity], owner_id: AgentID,
                         page: int = 1) -> OperationResult:
        """
        One owner's resources, newest first. Flagged items are only listed
        for the owner and the super-agent.
        """
        async def fetch() -> OperationResult:
            policy = await self._policy_for([owner_id])
            decision = policy.authorize_album(operator, owner_id)
            if not decision.allowed:
                return OperationResult.fail(decision.reason)
            include_flagged = policy.sees_flagged(operator, owner_id)
            owned = await self.resources.list(
                lambda r: r.owner == owner_id and (include_flagged or not r.flagged))
            listing = paginate(owned, page, self.config.page_size)
            return OperationResult.ok(page=listing, items=listing.items)

        return await self._list("list_album", operator, fetch)

    # Agents and grants

    async def readables(self, operator: Optional[Identity]) -> OperationResult:
        """Owners whose resources the operator may read, the operator first."""
        async def fetch() -> OperationResult:
            if operator is None:
                return OperationResult.fail(ErrorCode.UNAUTHENTICATED)
            graph = IdentityGraph(await self.agents.list())
            return OperationResult.ok(items=graph.readables(operator.id))

        return await self._list("readables", operator, fetch)

    async def grant_read(self, operator: Optional[Identity], viewer_id: AgentID) -> OperationResult:
        """Let ``viewer_id`` read the operator's resources."""
        return await self._edit_grants("grant_read", operator, viewer_id, grant=True)

    async def revoke_read(self, operator: Optional[Identity], viewer_id: AgentID) -> OperationResult:
        return await self._edit_grants("revoke_read", operator, viewer_id, grant=False)

    async def _edit_grants(self, event_type: str, operator: Optional[Identity],
                           viewer_id: AgentID, grant: bool) -> OperationResult:
        async def fetch() -> OperationResult:
            if operator is None:
                return OperationResult.fail(ErrorCode.UNAUTHENTICATED)
            agent = await self.agents.get(operator.id)
            if grant:
                await self.agents.get(viewer_id)
                changed = agent.grant(viewer_id)
            else:
                changed = agent.revoke(viewer_id)
            if changed:
                await self.agents.save(agent)
            return OperationResult.ok(items=list(agent.can_read))

        return await self._list(event_type, operator, fetch)

    async def list_agents(self, operator: Optional[Identity]) -> OperationResult:
        """Every registered agent. Super-agent only."""
        async def fetch() -> OperationResult:
            decision = (await self._policy_for()).authorize_privileged(operator)
            if not decision.allowed:
                return OperationResult.fail(decision.reason)
            return OperationResult.ok(items=await self.agents.list())

        return await self._list("list_agents", operator, fetch)

    def get_audit_logger(self) -> AuditLogger:
        return self.audit_logger

    async def close(self) -> None:
        """
        Release any resources held by collaborators.
        For in-memory use this is a no-op.
        """
        await self.resources.close()
        await self.agents.close()
        await self.audit_logger.close()
