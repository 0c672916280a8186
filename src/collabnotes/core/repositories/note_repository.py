"""Note repository for database operations."""

import uuid
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, desc, exists, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..exceptions import ConflictError
from ..models.activity import NoteActivity
from ..models.note import Note
from ..models.share import NoteShare, SharePermission
from ..models.types import utc_now
from ..sharing import ActivityEntry, NoteTransition

CONCURRENT_UPDATE = "Note was modified concurrently, reload and try again"


class NoteRepository:
    """Repository for note database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_note(self, note_data: dict, first_activity: ActivityEntry) -> Note:
        """Insert a note together with its first activity entry."""
        note = Note(**note_data)
        note.activities.append(_activity_row(first_activity))
        self.session.add(note)
        await self.session.commit()
        return await self.get_by_id(note.id)

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        """Get note with shares and activity, overwriting stale session state."""
        stmt = select(Note).where(Note.id == note_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_owned(
        self,
        owner_id: UUID,
        archived: bool = False,
        trashed: bool = False,
        category: Optional[str] = None,
    ) -> List[Note]:
        """Owner's notes in one archive/trash bucket, most recently updated first."""
        conditions = [
            Note.owner_id == owner_id,
            Note.is_archived == archived,
            Note.is_trashed == trashed,
        ]
        if category:
            conditions.append(Note.category == category)
        stmt = select(Note).where(and_(*conditions)).order_by(desc(Note.updated_at))
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def list_shared_with(self, user_id: UUID) -> List[Note]:
        """Live notes other users shared with user_id, most recently updated first."""
        stmt = (
            select(Note)
            .join(NoteShare, NoteShare.note_id == Note.id)
            .where(
                NoteShare.user_id == user_id,
                Note.owner_id != user_id,
                Note.is_archived.is_(False),
                Note.is_trashed.is_(False),
            )
            .order_by(desc(Note.updated_at))
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().unique())

    async def titles_by_ids(self, note_ids: Iterable[UUID]) -> dict[UUID, str]:
        ids = set(note_ids)
        if not ids:
            return {}
        stmt = select(Note.id, Note.title).where(Note.id.in_(ids))
        result = await self.session.execute(stmt)
        return {row.id: row.title for row in result}

    async def apply_transition(
        self, transition: NoteTransition, actor_id: UUID, allow_editors: bool = False
    ) -> None:
        """
        Persist a transition in one transaction.

        The note row is updated only if its version still equals the one the
        transition was computed from and the actor still holds the required
        role. If no row matches nothing is written and ConflictError is raised.
        """
        if not transition.changed:
            return

        note_id = transition.before.id
        actor_allowed = Note.owner_id == actor_id
        if allow_editors:
            actor_allowed = or_(
                actor_allowed,
                exists().where(
                    NoteShare.note_id == Note.id,
                    NoteShare.user_id == actor_id,
                    NoteShare.permission == SharePermission.EDITOR.value,
                ),
            )

        stmt = (
            update(Note)
            .where(Note.id == note_id, Note.version == transition.expected_version, actor_allowed)
            .values(**transition.values, version=transition.after.version, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:
                raise ConflictError(CONCURRENT_UPDATE)

            for entry in transition.share_upserts:
                await self._upsert_share(note_id, entry.user_id, entry.permission.value)

            if transition.share_removals:
                await self.session.execute(
                    delete(NoteShare)
                    .where(NoteShare.note_id == note_id, NoteShare.user_id.in_(transition.share_removals))
                    .execution_options(synchronize_session=False)
                )

            for activity in transition.activities:
                await self.session.execute(
                    insert(NoteActivity).values(**_activity_values(note_id, activity))
                )

            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise ConflictError(CONCURRENT_UPDATE) from exc
        except ConflictError:
            await self.session.rollback()
            raise

    async def _upsert_share(self, note_id: UUID, user_id: UUID, permission: str) -> None:
        result = await self.session.execute(
            update(NoteShare)
            .where(NoteShare.note_id == note_id, NoteShare.user_id == user_id)
            .values(permission=permission, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.session.execute(
                insert(NoteShare).values(
                    id=uuid.uuid4(), note_id=note_id, user_id=user_id, permission=permission
                )
            )

    async def delete_note(self, note_id: UUID, owner_id: UUID, expected_version: int) -> None:
        """Delete a trashed note and its children. Raises ConflictError if it changed meanwhile."""
        # children first: SQLite does not enforce ON DELETE CASCADE by default
        await self.session.execute(delete(NoteActivity).where(NoteActivity.note_id == note_id))
        await self.session.execute(delete(NoteShare).where(NoteShare.note_id == note_id))
        result = await self.session.execute(
            delete(Note)
            .where(
                Note.id == note_id,
                Note.owner_id == owner_id,
                Note.version == expected_version,
                Note.is_trashed.is_(True),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.session.rollback()
            raise ConflictError(CONCURRENT_UPDATE)
        await self.session.commit()


def _activity_values(note_id: UUID, activity: ActivityEntry) -> dict:
    return {
        "id": uuid.uuid4(),
        "note_id": note_id,
        "position": activity.position,
        "action": activity.action.value,
        "actor_id": activity.actor_id,
        "timestamp": activity.timestamp,
        "meta": dict(activity.meta),
    }


def _activity_row(activity: ActivityEntry) -> NoteActivity:
    return NoteActivity(
        position=activity.position,
        action=activity.action.value,
        actor_id=activity.actor_id,
        timestamp=activity.timestamp,
        meta=dict(activity.meta),
    )
