"""
Project member management tests
"""
import pytest
from fastapi import BackgroundTasks

from projectflow.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError, ValidationError
from projectflow.services.member_service import MemberService


@pytest.fixture
async def test_data(project_service, owner, make_user):
    """Create a named project and two users who are not yet members"""
    project = await project_service.create_project(owner)
    await project_service.update_project_name(owner, project.id, "Acme")
    return {
        'project': project,
        'alice': await make_user("alice", email="alice@example.com"),
        'bob': await make_user("bob", email="bob@example.com"),
    }


@pytest.fixture
def member_service(db_session, email_outbox):
    return MemberService(db_session, email_outbox)


@pytest.mark.asyncio
async def test_unknown_email_fails_without_changing_roles(member_service, test_data, owner, email_outbox):
    """Test that inviting an address with no profile is rejected and the role map is untouched"""
    project = test_data['project']

    with pytest.raises(ValidationError):
        await member_service.add_member(owner, project.id, "nobody@example.com", "member")

    assert project.members_with_role == {}
    assert email_outbox.sent == []


@pytest.mark.asyncio
async def test_add_member_sends_invitation(member_service, test_data, owner, email_outbox):
    project = test_data['project']

    member = await member_service.add_member(owner, project.id, "ALICE@example.com", "admin")

    assert member.role == "admin"
    assert project.members_with_role == {"alice": "admin"}
    kind, sent = email_outbox.sent[0]
    assert kind == "invitation"
    assert sent["to_email"] == "alice@example.com"
    assert sent["project_name"] == "Acme"
    assert sent["inviter_name"] == "Owner Tester"


@pytest.mark.asyncio
async def test_adding_existing_member_updates_role(member_service, test_data, owner, email_outbox):
    project = test_data['project']
    await member_service.add_member(owner, project.id, "alice@example.com", "viewer")

    await member_service.add_member(owner, project.id, "alice@example.com", "member")

    assert len(project.members) == 1
    assert project.members_with_role == {"alice": "member"}
    assert [kind for kind, _ in email_outbox.sent] == ["invitation", "role_update"]


@pytest.mark.asyncio
async def test_owner_role_is_protected(member_service, test_data, owner, make_user):
    project = test_data['project']
    await member_service.add_member(owner, project.id, "alice@example.com", "admin")
    alice = test_data['alice']

    with pytest.raises(ValidationError):
        await member_service.add_member(alice, project.id, "owner@example.com", "viewer")
    with pytest.raises(ValidationError):
        await member_service.update_member_role(alice, project.id, owner.user_id, "viewer")
    with pytest.raises(ValidationError):
        await member_service.remove_member(alice, project.id, owner.user_id)


@pytest.mark.asyncio
async def test_unknown_role_is_rejected(member_service, test_data, owner):
    with pytest.raises(ValidationError):
        await member_service.add_member(owner, test_data['project'].id, "alice@example.com", "superuser")


@pytest.mark.asyncio
async def test_plain_members_cannot_manage(member_service, test_data, owner):
    project = test_data['project']
    await member_service.add_member(owner, project.id, "alice@example.com", "member")

    with pytest.raises(InsufficientPermissionsError):
        await member_service.add_member(test_data['alice'], project.id, "bob@example.com", "viewer")

    assert project.members_with_role == {"alice": "member"}


@pytest.mark.asyncio
async def test_update_and_remove_member(member_service, test_data, owner, email_outbox):
    project = test_data['project']
    await member_service.add_member(owner, project.id, "bob@example.com", "viewer")

    await member_service.update_member_role(owner, project.id, "bob", "admin")
    assert project.members_with_role == {"bob": "admin"}

    await member_service.remove_member(owner, project.id, "bob")
    assert project.members_with_role == {}
    assert [kind for kind, _ in email_outbox.sent] == ["invitation", "role_update", "removal"]

    with pytest.raises(ResourceNotFoundError):
        await member_service.remove_member(owner, project.id, "bob")


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_the_change(db_session, test_data, owner, failing_outbox):
    """Test that a broken mail relay is logged and the membership change still commits"""
    service = MemberService(db_session, failing_outbox)

    member = await service.add_member(owner, test_data['project'].id, "alice@example.com", "member")

    assert member.role == "member"
    assert test_data['project'].members_with_role == {"alice": "member"}


@pytest.mark.asyncio
async def test_notifications_can_run_in_background(member_service, test_data, owner, email_outbox):
    background_tasks = BackgroundTasks()

    await member_service.add_member(
        owner, test_data['project'].id, "alice@example.com", "member", background_tasks=background_tasks
    )

    assert email_outbox.sent == []
    assert len(background_tasks.tasks) == 1

    await background_tasks()
    assert email_outbox.sent[0][0] == "invitation"


@pytest.mark.asyncio
async def test_list_members_puts_owner_first(member_service, test_data, owner, make_user):
    project = test_data['project']
    await member_service.add_member(owner, project.id, "alice@example.com", "viewer")
    outsider = await make_user("mallory")

    members = await member_service.list_members(test_data['alice'], project.id)

    assert [(m["user_id"], m["role"], m["is_owner"]) for m in members] == [
        ("owner", "owner", True),
        ("alice", "viewer", False),
    ]
    assert members[1]["email"] == "alice@example.com"
    assert await member_service.list_members(outsider, project.id) == []


@pytest.mark.asyncio
async def test_directory_spans_every_shared_project(member_service, project_service, test_data, owner):
    """Test that the directory lists each collaborator once with a role per shared project"""
    first = test_data['project']
    second = await project_service.create_project(owner)
    await project_service.update_project_name(owner, second.id, "Beta")
    await member_service.add_member(owner, first.id, "alice@example.com", "admin")
    await member_service.add_member(owner, second.id, "alice@example.com", "viewer")
    await member_service.add_member(owner, second.id, "bob@example.com", "member")

    directory = await member_service.list_directory(owner)

    assert [entry["user_id"] for entry in directory] == ["owner", "alice", "bob"]
    roles = {
        entry["user_id"]: {p["project_name"]: p["role"] for p in entry["projects"]}
        for entry in directory
    }
    assert roles["owner"] == {"Acme": "owner", "Beta": "owner"}
    assert roles["alice"] == {"Acme": "admin", "Beta": "viewer"}
    assert roles["bob"] == {"Beta": "member"}
    assert directory[1]["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_directory_is_scoped_to_the_caller(member_service, project_service, test_data, owner, make_user):
    await member_service.add_member(owner, test_data['project'].id, "bob@example.com", "member")
    other_owner = await make_user("dave")
    other = await project_service.create_project(other_owner)
    await project_service.update_project_name(other_owner, other.id, "Hidden")

    bob_view = await member_service.list_directory(test_data['bob'])

    assert [entry["user_id"] for entry in bob_view] == ["bob", "owner"]
    assert all(p["project_name"] == "Acme" for entry in bob_view for p in entry["projects"])
    assert await member_service.list_directory(test_data['alice']) == []
