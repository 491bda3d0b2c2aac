# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""Access policy decisions over every owner / member / outsider combination."""

import itertools

import pytest

from devtrack.core.errors import AuthorizationError
from devtrack.models.domain import Project, Ticket
from devtrack.services import access_policy as policy

USERS = ["owner", "u1", "u2", "u3"]
NOW = "2026-01-01T00:00:00+00:00"


def make_project(members, owner="owner"):
    return Project(
        id="p1", title="P", created_by=owner, team_members=list(members),
        created_at=NOW, updated_at=NOW,
    )


def make_ticket(created_by="u1"):
    return Ticket(
        id="t1", project_id="p1", title="T", description="D",
        reporter=created_by, created_by=created_by, created_at=NOW, updated_at=NOW,
    )


def member_sets():
    """Every subset of USERS, with and without the owner listed."""
    for size in range(len(USERS) + 1):
        for combo in itertools.combinations(USERS, size):
            yield set(combo)


# ============================================
# Project access
# ============================================
class TestProjectAccess:
    @pytest.mark.parametrize("members", list(member_sets()), ids=lambda m: ",".join(sorted(m)) or "none")
    def test_access_iff_owner_or_member(self, members):
        project = make_project(members)
        for user in USERS + ["stranger"]:
            expected = user == "owner" or user in members
            assert policy.can_access_project(user, project) is expected
            assert policy.can_access_ticket(user, project) is expected
            assert policy.can_create_ticket(user, project) is expected
            assert policy.can_comment(user, project) is expected
            assert policy.is_valid_project_principal(user, project) is expected

    @pytest.mark.parametrize("members", list(member_sets()), ids=lambda m: ",".join(sorted(m)) or "none")
    def test_modify_is_owner_only(self, members):
        project = make_project(members)
        for user in USERS + ["stranger"]:
            assert policy.can_modify_project(user, project) is (user == "owner")

    def test_owner_not_listed_still_authorized(self):
        project = make_project([])
        assert policy.can_access_project("owner", project)
        assert policy.is_valid_project_principal("owner", project)

    @pytest.mark.parametrize("user_id", [None, ""])
    def test_empty_principal_invalid(self, user_id):
        assert not policy.is_valid_project_principal(user_id, make_project(["u1"]))


# ============================================
# Member removal
# ============================================
class TestRemoveMember:
    @pytest.mark.parametrize("actor", USERS + ["stranger"])
    def test_owner_never_removable(self, actor):
        project = make_project(["owner", "u1", "u2"])
        assert policy.can_remove_member(actor, project, "owner") is False

    def test_owner_removes_member(self):
        assert policy.can_remove_member("owner", make_project(["u1"]), "u1")

    def test_owner_removes_non_member(self):
        assert policy.can_remove_member("owner", make_project([]), "u3")

    def test_member_cannot_remove(self):
        assert not policy.can_remove_member("u1", make_project(["u1", "u2"]), "u2")


# ============================================
# Ticket mutation and deletion
# ============================================
class TestTicketRules:
    def test_mutate_by_owner_member_or_creator(self):
        project = make_project(["u1"])
        ticket = make_ticket(created_by="u2")
        assert policy.can_mutate_ticket("owner", project, ticket)
        assert policy.can_mutate_ticket("u1", project, ticket)
        assert policy.can_mutate_ticket("u2", project, ticket)
        assert not policy.can_mutate_ticket("u3", project, ticket)

    def test_delete_by_owner_or_creator_only(self):
        project = make_project(["u1", "u2"])
        ticket = make_ticket(created_by="u2")
        assert policy.can_delete_ticket("owner", project, ticket)
        assert policy.can_delete_ticket("u2", project, ticket)
        assert not policy.can_delete_ticket("u1", project, ticket)
        assert not policy.can_delete_ticket("u3", project, ticket)

    @pytest.mark.parametrize("members", list(member_sets()), ids=lambda m: ",".join(sorted(m)) or "none")
    def test_delete_never_wider_than_mutate(self, members):
        project = make_project(members)
        ticket = make_ticket(created_by="u1")
        for user in USERS + ["stranger"]:
            if policy.can_delete_ticket(user, project, ticket):
                assert policy.can_mutate_ticket(user, project, ticket)

    def test_delete_without_project_falls_back_to_creator(self):
        ticket = make_ticket(created_by="u1")
        assert policy.can_delete_ticket("u1", None, ticket)
        assert not policy.can_delete_ticket("owner", None, ticket)


# ============================================
# authorize
# ============================================
class TestAuthorize:
    def test_allowed_passes(self):
        policy.authorize(True, "nope", "test")

    def test_denied_raises_403(self):
        with pytest.raises(AuthorizationError) as exc:
            policy.authorize(False, "Only project creator can add members", "add_member")
        assert exc.value.status_code == 403
        assert exc.value.message == "Only project creator can add members"
