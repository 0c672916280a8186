"""NoteService and SharingService against a real (SQLite) database."""

import pytest
from sqlalchemy import func, select

from collabnotes.core.access import NoteSnapshot
from collabnotes.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from collabnotes.core.models import NoteActivity, NoteShare, Notification, SharePermission
from collabnotes.core.repositories import NoteRepository
from collabnotes.core.schemas.notes import NoteCreate, NoteUpdate
from collabnotes.core.schemas.sharing import ShareRequest
from collabnotes.core.services import NoteService, SharingService
from collabnotes.core.sharing import edit_content


@pytest.fixture
async def owner(make_user):
    return await make_user("owner@example.com", "Owner")


@pytest.fixture
async def other(make_user):
    return await make_user("other@example.com", "Other")


@pytest.fixture
def notes(test_session):
    return NoteService(test_session)


@pytest.fixture
def sharing(test_session):
    return SharingService(test_session)


@pytest.fixture
async def note(notes, owner):
    return await notes.create_note(owner.id, NoteCreate(title="Plan", body="draft"))


async def count(test_session, model, **filters):
    stmt = select(func.count()).select_from(model).filter_by(**filters)
    return (await test_session.execute(stmt)).scalar_one()


class TestNoteLifecycle:
    async def test_create_logs_created_entry(self, note, owner):
        assert note.role == "owner"
        assert note.version == 1
        assert note.category == "personal"
        assert [entry.action for entry in note.activity] == ["created"]
        assert note.activity[0].actor_id == owner.id
        assert note.shared_with == []

    async def test_identical_edit_changes_nothing(self, notes, note, owner, test_session):
        same = await notes.update_note(note.id, owner.id, NoteUpdate(title="Plan", body="draft"))

        assert same.version == note.version
        assert same.last_edited_at is None
        assert await count(test_session, NoteActivity, note_id=note.id) == 1

    async def test_edit_records_changed_fields(self, notes, note, owner):
        edited = await notes.update_note(note.id, owner.id, NoteUpdate(body="final"))

        assert edited.body == "final"
        assert edited.version == 2
        assert edited.last_edited_by_id == owner.id
        assert edited.last_edited_at is not None
        assert edited.activity[-1].action == "edited"
        assert edited.activity[-1].meta == {"fields": ["body"]}

    async def test_edit_and_category_in_one_write(self, notes, note, owner):
        edited = await notes.update_note(note.id, owner.id, NoteUpdate(title="Plan v2", category="projects"))

        assert edited.version == 2
        assert [entry.action for entry in edited.activity] == ["created", "edited", "category_changed"]
        assert [entry.position for entry in edited.activity] == [0, 1, 2]

    async def test_stale_transition_is_rejected(self, note, owner, test_session):
        repo = NoteRepository(test_session)
        loaded = await repo.get_by_id(note.id)
        snapshot = NoteSnapshot.from_note(loaded)
        first = edit_content(snapshot, owner.id, body="one")
        second = edit_content(snapshot, owner.id, body="two")

        await repo.apply_transition(first, owner.id)
        with pytest.raises(ConflictError):
            await repo.apply_transition(second, owner.id)

        reloaded = await repo.get_by_id(note.id)
        assert reloaded.body == "one"
        assert reloaded.version == 2
        assert await count(test_session, NoteActivity, note_id=note.id) == 2

    async def test_archive_and_trash_are_exclusive(self, notes, note, owner):
        archived = await notes.set_archived(note.id, owner.id, True)
        assert archived.is_archived and not archived.is_trashed

        trashed = await notes.set_trashed(note.id, owner.id, True)
        assert trashed.is_trashed and not trashed.is_archived
        assert trashed.activity[-1].meta == {"unarchived": True}

        rearchived = await notes.set_archived(note.id, owner.id, True)
        assert rearchived.is_archived and not rearchived.is_trashed
        assert rearchived.activity[-1].meta == {"restored_from_trash": True}

    async def test_listing_buckets(self, notes, note, owner):
        await notes.create_note(owner.id, NoteCreate(title="Work", category="business"))

        live = await notes.list_notes(owner.id)
        assert {n.title for n in live.notes} == {"Plan", "Work"}
        business = await notes.list_notes(owner.id, category="business")
        assert [n.title for n in business.notes] == ["Work"]

        await notes.set_trashed(note.id, owner.id, True)
        assert [n.title for n in (await notes.list_notes(owner.id)).notes] == ["Work"]
        assert [n.title for n in (await notes.list_notes(owner.id, trashed=True)).notes] == ["Plan"]

    async def test_delete_requires_trash(self, notes, note, owner, test_session):
        with pytest.raises(ConflictError):
            await notes.delete_note(note.id, owner.id)

        await notes.set_trashed(note.id, owner.id, True)
        await notes.delete_note(note.id, owner.id)

        with pytest.raises(NotFoundError):
            await notes.get_note(note.id, owner.id)
        assert await count(test_session, NoteActivity, note_id=note.id) == 0

    async def test_stranger_sees_nothing(self, notes, note, other):
        with pytest.raises(NotFoundError):
            await notes.get_note(note.id, other.id)
        with pytest.raises(NotFoundError):
            await notes.update_note(note.id, other.id, NoteUpdate(body="x"))
        with pytest.raises(NotFoundError):
            await notes.set_trashed(note.id, other.id, True)


class TestSharing:
    async def test_repeated_share_is_idempotent(self, sharing, note, owner, other, test_session):
        request = ShareRequest(user_id=other.id, permission="viewer")
        first = await sharing.share_note(note.id, owner.id, request)
        second = await sharing.share_note(note.id, owner.id, request)

        assert second.version == first.version
        assert len(second.shared_with) == 1
        assert [entry.action for entry in second.activity].count("shared") == 1
        assert await count(test_session, NoteShare, note_id=note.id) == 1
        assert await count(test_session, Notification, recipient_id=other.id) == 1

    async def test_share_again_with_new_permission_changes_it(self, sharing, note, owner, other):
        await sharing.share_note(note.id, owner.id, ShareRequest(user_id=other.id))
        view = await sharing.share_note(
            note.id, owner.id, ShareRequest(email="OTHER@example.com", permission="editor")
        )

        assert [c.permission for c in view.shared_with] == ["editor"]
        assert view.activity[-1].action == "permission_changed"
        assert view.activity[-1].meta == {
            "user_id": str(other.id),
            "previous": "viewer",
            "permission": "editor",
        }

    async def test_unknown_target(self, sharing, note, owner):
        with pytest.raises(NotFoundError):
            await sharing.share_note(note.id, owner.id, ShareRequest(email="nobody@example.com"))

    async def test_collaborator_cannot_manage(self, sharing, notes, note, owner, other, make_user):
        third = await make_user("third@example.com", "Third")
        await sharing.share_note(note.id, owner.id, ShareRequest(user_id=other.id, permission="editor"))

        with pytest.raises(AuthorizationError):
            await sharing.share_note(note.id, other.id, ShareRequest(user_id=third.id))
        with pytest.raises(AuthorizationError):
            await sharing.revoke_share(note.id, other.id, other.id)
        with pytest.raises(AuthorizationError):
            await notes.update_note(note.id, other.id, NoteUpdate(category="projects"))
        with pytest.raises(AuthorizationError):
            await notes.set_archived(note.id, other.id, True)

    async def test_editor_edit_is_attributed(self, sharing, notes, note, owner, other):
        await sharing.share_note(note.id, owner.id, ShareRequest(user_id=other.id, permission="editor"))

        view = await notes.update_note(note.id, other.id, NoteUpdate(body="by other"))
        assert view.role == "editor"
        assert view.last_edited_by_id == other.id
        assert view.shared_with is None
        assert view.activity is None

    async def test_revoked_editor_write_conflicts(self, sharing, note, owner, other, test_session):
        await sharing.share_note(note.id, owner.id, ShareRequest(user_id=other.id, permission="editor"))
        repo = NoteRepository(test_session)
        snapshot = NoteSnapshot.from_note(await repo.get_by_id(note.id))
        pending = edit_content(snapshot, other.id, body="late")

        await sharing.revoke_share(note.id, owner.id, other.id)

        with pytest.raises(ConflictError):
            await repo.apply_transition(pending, other.id, allow_editors=True)

    async def test_revoke_unknown_collaborator(self, sharing, note, owner, other):
        with pytest.raises(NotFoundError):
            await sharing.revoke_share(note.id, owner.id, other.id)
        with pytest.raises(NotFoundError):
            await sharing.update_permission(note.id, owner.id, other.id, SharePermission.EDITOR)

    async def test_shared_with_me_skips_archived(self, sharing, notes, note, owner, other):
        await sharing.share_note(note.id, owner.id, ShareRequest(user_id=other.id))
        listed = await sharing.list_shared_with_me(other.id)
        assert [(n.id, n.role) for n in listed.notes] == [(note.id, "viewer")]
        assert listed.notes[0].shared_with is None

        await notes.set_archived(note.id, owner.id, True)
        assert (await sharing.list_shared_with_me(other.id)).notes == []
        assert (await sharing.list_shared_with_me(owner.id)).notes == []
