import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.main import app
from helpdesk.db import get_session
from helpdesk.models.user import Base, Profile
from helpdesk.models.category import Category
from helpdesk.core.roles import Actor, Role
from helpdesk.core.security import create_access_token
from helpdesk.services.blob_store import get_blob_store
from helpdesk.services.repository import TicketRepository
from helpdesk.services.ticket_service import TicketService
from helpdesk.services.comment_service import CommentService

# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class StepClock:
    """Returns a fixed start time, one minute later on every call."""

    def __init__(self, start=datetime(2026, 3, 2, 9, 0, 0), step=timedelta(minutes=1)):
        self.current = start
        self.step = step
        self.last = None

    def __call__(self):
        self.last = self.current
        self.current = self.current + self.step
        return self.last


class MemoryBlobStore:
    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail_upload = False
        self.fail_delete = False

    def upload(self, path_hint, data, content_type):
        if self.fail_upload:
            raise RuntimeError("bucket unreachable")
        self.objects[path_hint] = (data, content_type)
        return f"memory://{path_hint}"

    def delete(self, url):
        if self.fail_delete:
            raise RuntimeError("bucket unreachable")
        self.deleted.append(url)
        self.objects.pop(url.removeprefix("memory://"), None)


@pytest.fixture(scope="function")
def db_session():
    """
    Creates a fresh database session for a test.
    Creates tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def repo(db_session):
    return TicketRepository(db_session)


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def service(repo, blobs, clock):
    return TicketService(repo, blobs, clock=clock, clear_resolved_on_reopen=True)


@pytest.fixture
def comments(repo, clock):
    return CommentService(repo, clock=clock, strict_internal=False)


def _profile(db_session, id_, role, name):
    p = Profile(id=id_, email=f"{id_}@example.com", full_name=name, role=role.value)
    db_session.add(p)
    db_session.commit()
    return Actor(id=p.id, role=role)


@pytest.fixture
def reporter(db_session):
    return _profile(db_session, "rep-1", Role.reporter, "Rina Reporter")


@pytest.fixture
def other_reporter(db_session):
    return _profile(db_session, "rep-2", Role.reporter, "Rudi Reporter")


@pytest.fixture
def technician(db_session):
    return _profile(db_session, "tech-1", Role.technician, "Tono Technician")


@pytest.fixture
def other_technician(db_session):
    return _profile(db_session, "tech-2", Role.technician, "Tari Technician")


@pytest.fixture
def admin(db_session):
    return _profile(db_session, "admin-1", Role.admin, "Ayu Admin")


@pytest.fixture
def category(db_session):
    c = Category(name="Hardware", description="Printers and laptops")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture
def token_for():
    def _make(sub, role=None, email=None, full_name=None):
        meta = {}
        if role:
            meta["role"] = role
        if full_name:
            meta["full_name"] = full_name
        return create_access_token(sub, email=email or f"{sub}@example.com", user_metadata=meta)
    return _make


@pytest.fixture
def auth(token_for):
    def _headers(sub, role=None):
        return {"Authorization": f"Bearer {token_for(sub, role)}"}
    return _headers


@pytest.fixture(scope="function")
def client(db_session, blobs):
    """
    TestClient with overridden database and blob store dependencies.
    """
    def override_get_session():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_blob_store] = lambda: blobs

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
