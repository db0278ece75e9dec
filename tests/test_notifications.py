from sqlmodel import select

from lostfound.models.claim import Claim
from lostfound.models.notification import Notification
from lostfound.services import notifications


def test_failed_email_does_not_fail_status_update(client, session, make_user, make_found_item, notifier, auth_headers):
    poster, claimant = make_user(), make_user()
    item = make_found_item(poster)
    claim = Claim(found_item_id=item.id, claiming_user_id=claimant.id)
    session.add(claim)
    session.commit()
    session.refresh(claim)

    notifier.fail = True
    res = client.put(f"/claims/status/{claim.id}", json={"status": "Approved"}, headers=auth_headers(poster))

    assert res.status_code == 200
    session.expire_all()
    assert session.get(Claim, claim.id).status == "Approved"

    notification = session.exec(select(Notification)).one()
    assert notification.status == "failed"
    assert notification.attempts == 1
    assert "smtp down" in notification.last_error


def test_retry_failed_sends_and_respects_limit(session, notifier, monkeypatch):
    monkeypatch.setenv("NOTIFICATION_MAX_ATTEMPTS", "2")
    first = notifications.enqueue(session, "a@campus.edu", "Hello", "<p>hi</p>")
    session.commit()

    notifier.fail = True
    notifications.deliver(session.get_bind(), notifier, notifications.take_queued_ids(session))
    session.expire_all()
    assert session.get(Notification, first.id).status == "failed"

    assert notifications.retry_failed(session, notifier) == {"retried": 1, "sent": 0}
    # two attempts used up, nothing left to retry
    assert notifications.retry_failed(session, notifier) == {"retried": 0, "sent": 0}

    monkeypatch.setenv("NOTIFICATION_MAX_ATTEMPTS", "3")
    notifier.fail = False
    assert notifications.retry_failed(session, notifier) == {"retried": 1, "sent": 1}
    assert notifier.sent[0]["to"] == "a@campus.edu"


def test_deliver_skips_rows_already_sent(session, notifier):
    notifications.enqueue(session, "a@campus.edu", "Hello", "<p>hi</p>")
    session.commit()
    ids = notifications.take_queued_ids(session)

    notifications.deliver(session.get_bind(), notifier, ids)
    notifications.deliver(session.get_bind(), notifier, ids)

    assert len(notifier.sent) == 1


def test_admin_outbox_endpoints(client, session, make_user, notifier, auth_headers):
    admin = make_user(role="admin")
    regular = make_user()

    notifications.enqueue(session, "a@campus.edu", "Hello", "<p>hi</p>")
    session.commit()
    notifier.fail = True
    notifications.deliver(session.get_bind(), notifier, notifications.take_queued_ids(session))
    session.expire_all()

    assert client.get("/admin/notifications", headers=auth_headers(regular)).status_code == 403

    res = client.get("/admin/notifications?status=failed", headers=auth_headers(admin))
    assert res.status_code == 200
    assert [row["recipient"] for row in res.json()] == ["a@campus.edu"]

    notifier.fail = False
    res = client.post("/admin/notifications/retry", headers=auth_headers(admin))
    assert res.json() == {"retried": 1, "sent": 1}

    stats = client.get("/admin/stats", headers=auth_headers(admin)).json()
    assert stats["users"] == 2
    assert stats["notifications_failed"] == 0
