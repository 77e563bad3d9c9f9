import pytest
from pymongo.errors import DuplicateKeyError

import create_admin
from src.rxadmin.auth import verify_password
from src.rxadmin.data import users as users_repo


def test_health(api_client) -> None:
    response = api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_database_health_reports_ping(api_client) -> None:
    response = api_client.get("/api/health/database")

    assert response.status_code == 200
    assert response.json()["connected"] is True


def test_root_diagnostics(api_client) -> None:
    response = api_client.get("/")

    assert response.json()["health"] == "/api/health"


def test_index_creation_enforces_unique_emails(db) -> None:
    users_repo.create_user({"email": "a@example.com", "password": "x", "name": "A", "role": "super_admin"})

    with pytest.raises(DuplicateKeyError):
        users_repo.create_user({"email": "A@example.com", "password": "y", "name": "B", "role": "super_admin"})


@pytest.fixture
def seeded_admin(db, monkeypatch: pytest.MonkeyPatch):
    # create_admin imports the package as ``rxadmin``; point that copy at the same database
    from rxadmin.config import settings as script_settings
    from rxadmin.db import mongo as script_mongo

    monkeypatch.setattr(script_mongo, "get_database", lambda: db)
    monkeypatch.setattr(script_settings, "bcrypt_rounds", 4)
    return create_admin.seed_super_admin


def test_seed_super_admin_creates_then_resets(seeded_admin, db) -> None:
    user, created = seeded_admin("Owner@Example.com", "first-pass", "Owner")

    assert created
    assert user["role"] == "super_admin"
    assert "password" not in user

    with pytest.raises(ValueError):
        seeded_admin("owner@example.com", "second-pass", "Owner")

    user, created = seeded_admin("owner@example.com", "second-pass", "Owner", reset=True)
    assert not created
    assert verify_password("second-pass", db.users.find_one({"email": "owner@example.com"})["password"])


def test_create_admin_rejects_short_password(seeded_admin, capsys) -> None:
    assert create_admin.main(["--email", "x@example.com", "--password", "short"]) == 1
    assert "at least 8 characters" in capsys.readouterr().out
