from datetime import datetime, timedelta, timezone
from sqlmodel import select

from lostfound.models.otp import OTPVerification
from lostfound.models.user import User

REGISTRATION = {
    "name": "Asha Rao",
    "email": "asha@campus.edu",
    "password": "hunter22",
    "roll_number": "21CS101",
    "phone": "9876543210",
    "hostel": "Hostel C",
    "room_number": "214",
}


def _latest_otp(session, email):
    return session.exec(
        select(OTPVerification).where(OTPVerification.email == email).order_by(OTPVerification.id.desc())
    ).first()


def test_register_verify_and_login(client, session, notifier):
    res = client.post("/user/register", json=REGISTRATION)
    assert res.status_code == 201

    user = session.exec(select(User).where(User.email == "asha@campus.edu")).one()
    assert user.email_verified is False
    assert user.password_hash != "hunter22"

    otp = _latest_otp(session, "asha@campus.edu").otp_code
    assert notifier.sent[0]["to"] == "asha@campus.edu"
    assert otp in notifier.sent[0]["html"]

    res = client.post("/user/verify-email", json={"email": "asha@campus.edu", "otp": otp})
    assert res.status_code == 200
    session.refresh(user)
    assert user.email_verified is True

    res = client.post("/user/login", json={"email": "asha@campus.edu", "password": "hunter22"})
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["roll_number"] == "21CS101"

    me = client.get("/user/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.json()["user"]["email"] == "asha@campus.edu"


def test_login_cookie_authenticates_later_requests(client, make_user):
    make_user(email="cookie@campus.edu", password="secret123")

    res = client.post("/user/login", json={"email": "cookie@campus.edu", "password": "secret123"})
    assert "accessToken" in res.cookies

    assert client.get("/user/me").status_code == 200

    client.post("/user/logout")
    client.cookies.clear()
    assert client.get("/user/me").status_code == 401


def test_duplicate_registration_conflicts(client, make_user):
    make_user(email="asha@campus.edu")

    res = client.post("/user/register", json=REGISTRATION)
    assert res.status_code == 409
    assert res.json() == {"message": "User already exists with that email or roll number"}


def test_bad_credentials(client, make_user):
    make_user(email="asha@campus.edu", password="secret123")

    res = client.post("/user/login", json={"email": "asha@campus.edu", "password": "wrong"})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid credentials"}


def test_wrong_or_expired_otp(client, session, make_user):
    make_user(email="asha@campus.edu")
    session.add(OTPVerification(
        email="asha@campus.edu",
        otp_code="123456",
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    ))
    session.commit()

    res = client.post("/user/verify-email", json={"email": "asha@campus.edu", "otp": "123456"})
    assert res.status_code == 400
    assert res.json() == {"message": "Invalid or expired OTP"}

    res = client.post("/user/verify-email", json={"email": "nobody@campus.edu", "otp": "123456"})
    assert res.status_code == 400


def test_password_reset_flow(client, session, make_user):
    make_user(email="asha@campus.edu", password="old-pass")

    assert client.post("/user/forgot-password", json={"email": "ghost@campus.edu"}).status_code == 404

    res = client.post("/user/forgot-password", json={"email": "asha@campus.edu"})
    assert res.status_code == 200
    otp = _latest_otp(session, "asha@campus.edu").otp_code

    res = client.post(
        "/user/reset-password",
        json={"email": "asha@campus.edu", "otp": otp, "new_password": "new-pass"},
    )
    assert res.status_code == 200

    # the code is single use
    res = client.post(
        "/user/reset-password",
        json={"email": "asha@campus.edu", "otp": otp, "new_password": "other-pass"},
    )
    assert res.status_code == 400

    assert client.post("/user/login", json={"email": "asha@campus.edu", "password": "new-pass"}).status_code == 200


def test_profile_updates_and_counts(client, session, make_user, make_lost_item, make_found_item, auth_headers):
    user = make_user()
    make_lost_item(user)
    make_found_item(user)

    res = client.patch("/user/update-phone", json={"phone_number": "9000000001"}, headers=auth_headers(user))
    assert res.status_code == 200

    res = client.patch(
        "/user/update-hostel-room", json={"hostel": "Hostel D", "room_number": "12"}, headers=auth_headers(user)
    )
    assert res.status_code == 200

    res = client.patch(
        "/user/update-hostel-room", json={"hostel": "Hostel D"}, headers=auth_headers(user)
    )
    assert res.status_code == 400

    me = client.get("/user/me", headers=auth_headers(user)).json()["user"]
    assert me["phone"] == "9000000001"
    assert me["hostel"] == "Hostel D"

    counts = client.get("/user/getDashboardCounts", headers=auth_headers(user)).json()
    assert counts == {"lost_items": 1, "found_items": 1, "users": 1}


def test_invalid_token_rejected(client):
    res = client.get("/user/me", headers={"Authorization": "Bearer not-a-token"})
    assert res.status_code == 401
    assert res.json() == {"message": "Invalid or expired token"}


def test_mixed_case_email_round_trip(client, session, notifier):
    res = client.post("/user/register", json={**REGISTRATION, "email": "Bob@Campus.EDU", "password": "secret123"})
    assert res.status_code == 201

    stored = session.exec(select(User)).one()
    otp = _latest_otp(session, stored.email).otp_code
    assert notifier.sent[0]["to"] == stored.email

    res = client.post("/user/verify-email", json={"email": "Bob@Campus.EDU", "otp": otp})
    assert res.status_code == 200

    res = client.post("/user/login", json={"email": "Bob@Campus.EDU", "password": "secret123"})
    assert res.status_code == 200

    assert client.post("/user/forgot-password", json={"email": "Bob@Campus.EDU"}).status_code == 200


def test_password_longer_than_hash_input_is_rejected(client, session, make_user):
    res = client.post("/user/register", json={**REGISTRATION, "password": "p" * 100})
    assert res.status_code == 400
    assert "password" in res.json()["message"]
    assert session.exec(select(User)).all() == []

    make_user(email="asha@campus.edu", password="old-pass")
    client.post("/user/forgot-password", json={"email": "asha@campus.edu"})
    otp = _latest_otp(session, "asha@campus.edu").otp_code

    res = client.post(
        "/user/reset-password",
        json={"email": "asha@campus.edu", "otp": otp, "new_password": "p" * 100},
    )
    assert res.status_code == 400

    # rejected before the code is spent
    res = client.post(
        "/user/reset-password",
        json={"email": "asha@campus.edu", "otp": otp, "new_password": "p" * 72},
    )
    assert res.status_code == 200

    res = client.post("/user/login", json={"email": "asha@campus.edu", "password": "p" * 100})
    assert res.status_code == 401
