import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.database import Base, get_db, get_session_factory
from app.main import app
from app.models.user import User
from app.models.company import Company
from app.services.auth_service import hash_password

TEST_DB_URL = "sqlite:///./test_internship.db"
TEST_PASSWORD = "password123"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_session_factory] = lambda: TestingSession


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def registry():
    live = app.state.connection_registry
    yield live
    live.close_all()


@pytest.fixture
def seed_users(db):
    password_hash = hash_password(TEST_PASSWORD)
    users = {
        "student": User(email="student@test.com", password_hash=password_hash, full_name="김학생", role="student"),
        "student2": User(
            email="student2@test.com",
            password_hash=password_hash,
            full_name="이학생",
            role="student",
            location="부산",
        ),
        "company": User(email="company@test.com", password_hash=password_hash, full_name="박담당", role="company"),
        "admin": User(email="admin@test.com", password_hash=password_hash, full_name="관리자", role="admin"),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_company(db, seed_users):
    company = Company(user_id=seed_users["company"].user_id, name="테스트컴퍼니", industry="IT", location="서울")
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


class RecordingConnection:
    """레지스트리 테스트용 연결. 보낸 이벤트를 기록하고, fail=True면 쓰기에 실패합니다."""

    def __init__(self, fail: bool = False):
        self.events = []
        self.closed = False
        self.fail = fail

    def send(self, event):
        if self.fail or self.closed:
            raise ConnectionError("broken pipe")
        self.events.append(event)

    def close(self):
        self.closed = True

    def of_type(self, event_type):
        return [e for e in self.events if e.get("type") == event_type]


def get_token(client, email: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": TEST_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
