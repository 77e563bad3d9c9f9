import mongomock
import pytest
from fastapi.testclient import TestClient

from src.rxadmin.auth import hash_password
from src.rxadmin.config import settings
from src.rxadmin.data import distributors as distributors_repo
from src.rxadmin.data import districts as districts_repo
from src.rxadmin.data import users as users_repo
from src.rxadmin.db import mongo
from src.rxadmin.main import create_app
from tests.helpers import PASSWORD, bearer


@pytest.fixture
def db(monkeypatch: pytest.MonkeyPatch):
    database = mongomock.MongoClient()["rxadmin_test"]
    monkeypatch.setattr(mongo, "get_database", lambda: database)
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)
    mongo.ensure_indexes(database)
    return database


@pytest.fixture
def api_client(db) -> TestClient:
    return TestClient(create_app())


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer("super_admin")


@pytest.fixture
def district(db) -> dict:
    return districts_repo.create_district({"name": "Lahore Central", "code": "lhr"})


@pytest.fixture
def kam(db, district) -> dict:
    return users_repo.create_user(
        {
            "email": "kam@example.com",
            "password": hash_password(PASSWORD),
            "name": "Kamran",
            "role": "kam",
            "district_id": district["_id"],
        }
    )


@pytest.fixture
def kam_headers(kam, district) -> dict[str, str]:
    return bearer("kam", user_id=str(kam["_id"]), district_id=str(district["_id"]))


@pytest.fixture
def distributor(db) -> dict:
    return distributors_repo.create_distributor(
        {
            "email": "dist@example.com",
            "password": hash_password(PASSWORD),
            "name": "City Pharma",
            "phone": "0300-1234567",
        }
    )
