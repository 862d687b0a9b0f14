"""
Tests for the authorization policy rules.
"""

from datetime import datetime

import pytest

from mediagate.authz.policy import Policy
from mediagate.authz.types import Action, Advisory
from mediagate.core.types import AgentID, Note
from mediagate.errors import ErrorCode


OWNER_ONLY = [Action.DEFLAG, Action.PUBLISH, Action.UNPUBLISH, Action.DELETE, Action.EDIT_METADATA]
READER = [Action.VIEW, Action.LIKE, Action.FLAG, Action.ADD_NOTE]


def published(resource):
    resource.published = datetime(2024, 2, 1)
    return resource


class TestAnonymous:
    """Rule 1: no operator"""

    def test_can_view_published(self, policy, image):
        assert policy.authorize(None, published(image), Action.VIEW).allowed

    def test_cannot_view_unpublished(self, policy, image):
        decision = policy.authorize(None, image, Action.VIEW)
        assert not decision.allowed
        assert decision.reason == ErrorCode.UNAUTHENTICATED

    def test_cannot_view_flagged_published(self, policy, image, troy):
        image = published(image)
        image.flaggers.append(troy.id)
        decision = policy.authorize(None, image, Action.VIEW)
        assert decision.reason == ErrorCode.FLAGGED

    @pytest.mark.parametrize("action", [a for a in Action if a is not Action.VIEW])
    def test_mutations_need_authentication(self, policy, image, action):
        decision = policy.authorize(None, published(image), action)
        assert not decision.allowed
        assert decision.reason == ErrorCode.UNAUTHENTICATED


class TestSuperAgent:
    """Rule 2: the configured super-agent"""

    @pytest.mark.parametrize("action", [a for a in Action if a is not Action.DELETE_NOTE])
    def test_everything_allowed_on_someone_elses_flagged_resource(self, policy, image, root, troy, action):
        image.flaggers.append(troy.id)
        decision = policy.authorize(root.identity, image, action)
        assert decision.allowed
        assert decision.rule == "super_agent"

    def test_flagged_view_carries_advisory(self, policy, image, root, troy):
        image.flaggers.append(troy.id)
        decision = policy.authorize(root.identity, image, Action.VIEW)
        assert decision.advisories == [Advisory.FLAGGED]

    def test_no_override_when_unset(self, graph, image, root):
        decision = Policy(graph, None).authorize(root.identity, image, Action.VIEW)
        assert not decision.allowed
        assert decision.reason == ErrorCode.FORBIDDEN

    def test_override_follows_the_configured_email(self, graph, image, troy, root):
        policy = Policy(graph, troy.email)
        assert policy.is_super_agent(troy.identity)
        assert not policy.is_super_agent(root.identity)
        assert policy.authorize(troy.identity, image, Action.DELETE).allowed


class TestOwner:
    """Rule 3: the resource owner"""

    @pytest.mark.parametrize("action", [a for a in Action if a is not Action.DELETE_NOTE])
    def test_owner_allowed(self, policy, image, daniel, action):
        assert policy.authorize(daniel.identity, image, action).allowed

    def test_owner_view_of_flagged_carries_advisory(self, policy, image, daniel, troy):
        image.flaggers.append(troy.id)
        decision = policy.authorize(daniel.identity, image, Action.VIEW)
        assert decision.allowed
        assert decision.advisories == [Advisory.FLAGGED]

    def test_owner_may_deflag_own_resource(self, policy, image, daniel, troy):
        image.flaggers.append(troy.id)
        assert policy.authorize(daniel.identity, image, Action.DEFLAG).allowed

    def test_owner_may_not_deflag_after_super_agent_ruled(self, policy, image, daniel, troy, lanny):
        image.overruled_flaggers.append(troy.id)
        image.flaggers.append(lanny.id)
        decision = policy.authorize(daniel.identity, image, Action.DEFLAG)
        assert not decision.allowed
        assert decision.reason == ErrorCode.ADMINISTRATIVELY_APPROVED


class TestReader:
    """Rule 4: agents the owner granted read access"""

    @pytest.mark.parametrize("action", READER)
    def test_reader_actions_allowed(self, policy, image, troy, action):
        assert policy.authorize(troy.identity, image, action).allowed

    @pytest.mark.parametrize("action", OWNER_ONLY)
    def test_owner_actions_forbidden(self, policy, image, troy, action):
        decision = policy.authorize(troy.identity, image, action)
        assert not decision.allowed
        assert decision.reason == ErrorCode.FORBIDDEN

    def test_viewer_side_grant_is_not_enough(self, policy, image, lanny):
        # lanny lists daniel in her own can_read; that does not open daniel's image
        decision = policy.authorize(lanny.identity, image, Action.VIEW)
        assert not decision.allowed
        assert decision.reason == ErrorCode.FORBIDDEN


class TestFlagged:
    """Rule 5: flagged resources are hidden from everyone else"""

    def test_reader_cannot_view(self, policy, image, troy, lanny):
        image.flaggers.append(lanny.id)
        decision = policy.authorize(troy.identity, image, Action.VIEW)
        assert decision.reason == ErrorCode.FLAGGED

    def test_reader_cannot_like(self, policy, image, troy, lanny):
        image.flaggers.append(lanny.id)
        assert policy.authorize(troy.identity, image, Action.LIKE).reason == ErrorCode.FLAGGED

    def test_reader_may_still_flag(self, policy, image, troy):
        image.flaggers.append(troy.id)
        assert policy.authorize(troy.identity, image, Action.FLAG).allowed

    def test_stranger_may_not_flag_unpublished(self, policy, image, troy, lanny):
        image.flaggers.append(troy.id)
        assert policy.authorize(lanny.identity, image, Action.FLAG).reason == ErrorCode.FORBIDDEN

    def test_reader_cannot_delete(self, policy, image, troy):
        image.flaggers.append(troy.id)
        assert policy.authorize(troy.identity, image, Action.DELETE).reason == ErrorCode.FORBIDDEN


class TestPublished:
    """Rule 6: published resources are globally readable"""

    @pytest.mark.parametrize("action", READER)
    def test_stranger_reader_actions_allowed(self, policy, image, lanny, action):
        decision = policy.authorize(lanny.identity, published(image), action)
        assert decision.allowed
        assert decision.rule == "published"

    @pytest.mark.parametrize("action", OWNER_ONLY)
    def test_stranger_owner_actions_forbidden(self, policy, image, lanny, action):
        decision = policy.authorize(lanny.identity, published(image), action)
        assert decision.reason == ErrorCode.FORBIDDEN


class TestDefault:
    """Rule 7"""

    def test_stranger_on_unpublished_is_forbidden(self, policy, image, lanny):
        decision = policy.authorize(lanny.identity, image, Action.VIEW)
        assert not decision.allowed
        assert decision.reason == ErrorCode.FORBIDDEN
        assert decision.rule == "default"


class TestNoteDeletion:
    """Who may delete which note"""

    @pytest.fixture
    def note(self, image, troy):
        note = Note(author=troy.id, text="nice")
        image.notes.append(note)
        return note

    def test_author_may_delete(self, policy, image, note, troy):
        assert policy.authorize(troy.identity, image, Action.DELETE_NOTE, note).allowed

    def test_owner_may_delete(self, policy, image, note, daniel):
        assert policy.authorize(daniel.identity, image, Action.DELETE_NOTE, note).allowed

    def test_super_agent_may_delete(self, policy, image, note, root):
        assert policy.authorize(root.identity, image, Action.DELETE_NOTE, note).allowed

    def test_other_reader_may_not_delete(self, policy, image, note, lanny):
        decision = policy.authorize(lanny.identity, published(image), Action.DELETE_NOTE, note)
        assert decision.reason == ErrorCode.FORBIDDEN

    def test_anonymous_may_not_delete(self, policy, image, note):
        assert policy.authorize(None, image, Action.DELETE_NOTE, note).reason == ErrorCode.UNAUTHENTICATED

    def test_missing_note(self, policy, image, daniel):
        stray = Note(author=AgentID("troy"), text="not attached")
        decision = policy.authorize(daniel.identity, image, Action.DELETE_NOTE, stray)
        assert decision.reason == ErrorCode.NOT_FOUND
        assert policy.authorize(daniel.identity, image, Action.DELETE_NOTE, None).reason == ErrorCode.NOT_FOUND


class TestListings:
    """Privileged and per-owner listings"""

    def test_privileged_listing(self, policy, root, daniel):
        assert policy.authorize_privileged(root.identity).allowed
        assert policy.authorize_privileged(daniel.identity).reason == ErrorCode.FORBIDDEN
        assert policy.authorize_privileged(None).reason == ErrorCode.UNAUTHENTICATED

    def test_album_access(self, policy, daniel, troy, lanny, root):
        assert policy.authorize_album(daniel.identity, daniel.id).allowed
        assert policy.authorize_album(troy.identity, daniel.id).allowed
        assert policy.authorize_album(root.identity, daniel.id).allowed
        assert policy.authorize_album(lanny.identity, daniel.id).reason == ErrorCode.FORBIDDEN
        assert policy.authorize_album(None, daniel.id).reason == ErrorCode.UNAUTHENTICATED

    def test_only_owner_and_super_agent_see_flagged(self, policy, daniel, troy, root):
        assert policy.sees_flagged(daniel.identity, daniel.id)
        assert policy.sees_flagged(root.identity, daniel.id)
        assert not policy.sees_flagged(troy.identity, daniel.id)
        assert not policy.sees_flagged(None, daniel.id)
