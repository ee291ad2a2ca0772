"""Pytest fixtures for testing"""

import pytest
from typing import Callable, Dict, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from mining_ledger.api.main import create_app
from mining_ledger.infrastructure.database.models import Base
from mining_ledger.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER_ID = "user-owner"


def auth(user_id: str) -> Dict[str, str]:
    """Headers identifying the caller"""
    return {"X-User-ID": user_id}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def org_id(client: TestClient) -> str:
    """Organization owned by OWNER_ID"""
    response = client.post("/v1/orgs", json={"name": "Star Mining Co."}, headers=auth(OWNER_ID))
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def add_member(client: TestClient, org_id: str) -> Callable[[str, str], dict]:
    """Add a user to the test organization with the given role"""

    def _add(user_id: str, role: str = "miner") -> dict:
        response = client.post(
            f"/v1/orgs/{org_id}/members",
            json={"user_id": user_id, "role": role},
            headers=auth(OWNER_ID),
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _add
