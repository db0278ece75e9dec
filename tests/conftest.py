import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from lostfound.db.db import create_db_and_tables, get_session
from lostfound.main import app
from lostfound.models.category import Category
from lostfound.models.found_item import FoundItem, FoundItemPhoto
from lostfound.models.lost_item import LostItem, LostItemPhoto
from lostfound.models.user import User
from lostfound.utils.auth_helper import create_access_token
from lostfound.utils.mailer import get_notifier
from lostfound.utils.security import hash_secret


class RecordingNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_db_and_tables(engine)

    with Session(engine) as session:
        yield session

    engine.dispose()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session, notifier):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_notifier] = lambda: notifier

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make_user(name="Student", role="user", email=None, password="secret123"):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name,
            email=email or f"user{n}@campus.edu",
            password_hash=hash_secret(password),
            roll_number=f"R{n:04d}",
            phone_number=f"99900000{n:02d}",
            hostel=f"Hostel {chr(64 + n)}",
            room_number=str(100 + n),
            role=role,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def category(session):
    category = Category(name="Electronics", description="Phones, chargers, earbuds")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def make_found_item(session, category):
    def _make_found_item(poster, name="Blue water bottle", pickup_location="Main gate security desk"):
        item = FoundItem(
            posted_by=poster.id,
            name=name,
            description="Found on a bench near the library",
            found_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            found_location="Library",
            pickup_location=pickup_location,
            category_id=category.id,
            security_question="What sticker is on it?",
            security_answer_hash=hash_secret("blue"),
        )
        session.add(item)
        session.commit()
        session.refresh(item)

        session.add(FoundItemPhoto(found_item_id=item.id, url="https://img.example.com/bottle.jpg"))
        session.commit()
        return item

    return _make_found_item


@pytest.fixture
def make_lost_item(session, category):
    def _make_lost_item(poster, name="Black wallet"):
        item = LostItem(
            posted_by=poster.id,
            name=name,
            description="Leather wallet with a student ID",
            lost_date=datetime(2024, 3, 2, tzinfo=timezone.utc),
            lost_location="Gym",
            category_id=category.id,
        )
        session.add(item)
        session.commit()
        session.refresh(item)

        session.add(LostItemPhoto(lost_item_id=item.id, url="https://img.example.com/wallet.jpg"))
        session.commit()
        return item

    return _make_lost_item


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _auth_headers
