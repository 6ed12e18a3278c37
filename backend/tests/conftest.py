import os
import tempfile

# Settings are read at import time, so the test configuration goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="bebe-depot-uploads-")
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, enable_sqlite_foreign_keys, get_db
from main import app
from models.users import User
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token


@pytest.fixture()
def engine():
    """Fresh in-memory database per test, shared by every connection."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def user(db_session):
    account = User(email="admin@bebe-depot.com", password_hash=get_password_hash("Admin@2024"), username="admin")
    db_session.add(account)
    db_session.commit()
    db_session.refresh(account)
    return account


@pytest.fixture()
def auth_headers(user):
    token = create_access_token(data={"sub": user.email})
    return {"Authorization": f"Bearer {token}"}


# ---- factories going through the API ----

@pytest.fixture()
def make_category(client):
    def _make(name="Poussettes", description=None):
        res = client.post("/categories", json={"name": name, "description": description})
        assert res.status_code == 201, res.text
        return res.json()
    return _make


@pytest.fixture()
def make_client(client, auth_headers):
    def _make(first_name="Amira", last_name="Ben Salah", email="amira@example.com", phone="+216 20 000 000",
              address="12 rue de Carthage, Tunis"):
        res = client.post("/clients", headers=auth_headers, json={
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "phoneNumber": phone,
            "address": address,
        })
        assert res.status_code == 201, res.text
        return res.json()
    return _make


@pytest.fixture()
def make_co_client(client, auth_headers):
    def _make(first_name="Sonia", last_name="Trabelsi", email="sonia@example.com", rib="TN59 1000 6035 1835 9847 8831"):
        res = client.post("/co-clients", headers=auth_headers, json={
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "phoneNumber": "+216 22 111 222",
            "address": "5 avenue Habib Bourguiba, Sousse",
            "rib": rib,
        })
        assert res.status_code == 201, res.text
        return res.json()
    return _make


@pytest.fixture()
def make_product(client, auth_headers, make_category):
    def _make(category_id=None, **fields):
        if category_id is None:
            category_id = make_category()["id"]
        body = {"name": "Poussette Yoyo", "salePrice": 100.0, "purchasePrice": 60.0, "categoryId": category_id}
        body.update(fields)
        res = client.post("/products", headers=auth_headers, json=body)
        assert res.status_code == 201, res.text
        return res.json()
    return _make
