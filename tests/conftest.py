import os

# Point the application at an in-memory database before app modules are imported
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import timedelta

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.cache import get_cache_filler, get_redis
from app.database import Base, get_db, make_engine
from app.main import app
from app.models import Book, Loan, User
from app.services.lending import LendingService
from app.services.reports import CacheFiller, ReportService


@pytest.fixture
def db():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def cache(redis_server):
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def filler(redis_server):
    cache_filler = CacheFiller(fakeredis.FakeRedis(server=redis_server, decode_responses=True))
    yield cache_filler
    cache_filler.shutdown()


@pytest.fixture
def lending(db):
    return LendingService(db)


@pytest.fixture
def reports(db, cache, filler):
    return ReportService(db, cache, filler)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name="Reader"):
        counter["n"] += 1
        user = User(name=name, email=f"reader{counter['n']}@example.com", password="x", role="member")
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def make_book(db):
    def _make_book(title="Dune"):
        book = Book(title=title, author="Frank Herbert", isbn="9780441013593")
        db.add(book)
        db.commit()
        return book
    return _make_book


@pytest.fixture
def make_loan(db):
    """Insert a loan row directly, bypassing the lending rules."""
    def _make_loan(user, book, loan_date, return_date=None, period=timedelta(days=14)):
        loan = Loan(
            user_id=user.id,
            book_id=book.id,
            loan_date=loan_date,
            due_date=loan_date + period,
            return_date=return_date,
        )
        db.add(loan)
        db.commit()
        return loan
    return _make_loan


@pytest.fixture
def client(db, cache, filler):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_redis] = lambda: cache
    app.dependency_overrides[get_cache_filler] = lambda: filler
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
