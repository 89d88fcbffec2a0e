import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from gradebook.core import database
from gradebook.core.auth import create_access_token
from gradebook.core.clock import FixedClock, get_clock
from gradebook.models.entities import Assignment, Submission
from gradebook.models.postgresql import Base
from main import app

NOW = datetime(2025, 3, 10, 12, 0, 0)
TEACHER_ID = 1
STUDENT_ID = 100
CLASS_ID = 7

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()

@pytest.fixture
def clock():
    return FixedClock(NOW)

@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[database.get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()

@pytest.fixture
def teacher_headers():
    return {"Authorization": f"Bearer {create_access_token(subject=TEACHER_ID, role='teacher')}"}

@pytest.fixture
def student_headers():
    return {"Authorization": f"Bearer {create_access_token(subject=STUDENT_ID, role='student')}"}

@pytest.fixture
def make_assignment():
    def factory(**overrides):
        fields = dict(
            id=1,
            title="Fractions worksheet",
            description="Complete all exercises on page 12.",
            class_id=CLASS_ID,
            subject_id=3,
            teacher_id=TEACHER_ID,
            max_points=100,
            due_date=NOW + timedelta(days=5),
            late_penalty_percent=10,
            allow_late_submission=True,
            is_published=True,
        )
        fields.update(overrides)
        return Assignment(**fields)
    return factory

@pytest.fixture
def make_submission():
    def factory(**overrides):
        fields = dict(id=1, assignment_id=1, student_id=STUDENT_ID)
        fields.update(overrides)
        return Submission(**fields)
    return factory
