import os
from sqlmodel import Session, SQLModel, create_engine

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./lostfound.db")

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)


def create_db_and_tables(bind=engine):
    # table modules must be imported so their metadata is registered
    from lostfound.models import (  # noqa: F401
        category,
        claim,
        found_item,
        lost_item,
        notification,
        otp,
        reported_lost_found,
        user,
    )

    SQLModel.metadata.create_all(bind)


def get_session():
    with Session(engine) as session:
        yield session
