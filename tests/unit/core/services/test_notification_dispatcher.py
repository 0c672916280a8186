"""Unit tests for best-effort notification dispatch."""

import uuid

from collabnotes.core.models.notification import NotificationType
from collabnotes.core.models.share import SharePermission
from collabnotes.core.services import notification_service as ns
from collabnotes.core.sharing import NotificationIntent


class DummySession:
    def __init__(self):
        self.rollbacks = 0

    async def rollback(self):
        self.rollbacks += 1


class FlakyNotificationRepo:
    """Fails for one recipient, records the rest."""

    def __init__(self, failing_recipient):
        self.failing_recipient = failing_recipient
        self.created = []

    async def create_notification(self, data):
        if data["recipient_id"] == self.failing_recipient:
            raise RuntimeError("insert failed")
        self.created.append(data)
        return data


def intent(recipient, kind=NotificationType.SHARED, permission=SharePermission.VIEWER):
    return NotificationIntent(
        recipient_id=recipient,
        actor_id=uuid.uuid4(),
        note_id=uuid.uuid4(),
        type=kind,
        permission=permission,
    )


async def test_failures_are_counted_not_raised(monkeypatch):
    bad, good = uuid.uuid4(), uuid.uuid4()
    repo = FlakyNotificationRepo(bad)
    monkeypatch.setattr(ns, "NotificationRepository", lambda s: repo)
    session = DummySession()

    report = await ns.NotificationDispatcher(session).dispatch([intent(bad), intent(good)])

    assert report.delivered == 1
    assert report.failed == 1
    assert session.rollbacks == 1
    assert [row["recipient_id"] for row in repo.created] == [good]


async def test_unshared_intent_has_no_permission(monkeypatch):
    repo = FlakyNotificationRepo(None)
    monkeypatch.setattr(ns, "NotificationRepository", lambda s: repo)

    await ns.NotificationDispatcher(DummySession()).dispatch(
        [intent(uuid.uuid4(), NotificationType.UNSHARED, None)]
    )

    assert repo.created[0]["type"] == "unshared"
    assert repo.created[0]["permission"] is None


def test_describe_messages():
    assert ns.describe("shared", "Ann", "Plan") == "Ann shared a note with you • Plan"
    assert ns.describe("unshared", "Ann", "Plan") == "Ann unshared a note with you • Plan"
    assert ns.describe("permission_changed", "Ann", "Plan", "editor") == (
        "Ann changed your permission to editor • Plan"
    )
