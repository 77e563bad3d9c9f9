import json

import jwt
import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.rxadmin.api.responses import ApiError, error_response, guarded, register_exception_handlers, success_response
from src.rxadmin.auth import authorize, hash_password, sign_token, verify_password, verify_token
from src.rxadmin.auth.tokens import InvalidTokenError
from src.rxadmin.config import settings
from src.rxadmin.data import distributors as distributors_repo
from src.rxadmin.data import users as users_repo
from src.rxadmin.models.domain import AuthIdentity

from tests.helpers import PASSWORD, bearer


def test_success_envelope_serializes_object_ids() -> None:
    key = ObjectId()
    response = success_response({"id": key}, "Done", 201)

    assert response.status_code == 201
    assert json.loads(response.body) == {"success": True, "data": {"id": str(key)}, "message": "Done"}


def test_error_envelope_omits_empty_details() -> None:
    response = error_response("Nope", 404)

    assert response.status_code == 404
    assert json.loads(response.body) == {"success": False, "error": {"message": "Nope"}}


def test_guarded_turns_unexpected_errors_into_500_envelope() -> None:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    @guarded("Failed to do the thing")
    def boom():
        raise RuntimeError("database on fire")

    @app.get("/expected")
    @guarded("Failed to do the thing")
    def expected():
        raise ApiError("Bad input", 400)

    client = TestClient(app)

    response = client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": {"message": "Failed to do the thing"}}

    response = client.get("/expected")
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Bad input"


def test_token_round_trip_keeps_scope_claims() -> None:
    identity = AuthIdentity(user_id="u1", email="a@b.c", role="kam", district_id="d1")

    verified = verify_token(sign_token(identity))

    assert verified.user_id == "u1"
    assert verified.role == "kam"
    assert verified.assigned_district == "d1"
    assert verified.city_id is None


def test_token_signed_with_other_secret_is_rejected() -> None:
    forged = jwt.encode({"userId": "u1", "role": "super_admin"}, "not-the-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        verify_token(forged)


def test_token_with_unknown_role_is_rejected() -> None:
    token = jwt.encode({"userId": "u1", "role": "doctor"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)

    with pytest.raises(InvalidTokenError):
        verify_token(token)


def test_authorize_verdicts() -> None:
    token = sign_token(AuthIdentity(user_id="u1", email="k@x.y", role="kam"))

    assert authorize(None).message == "No token provided"
    assert authorize("Token abc").message == "No token provided"
    assert authorize("Bearer garbage").authorized is False
    assert authorize(f"Bearer {token}", ["super_admin"]).message == "Insufficient permissions"

    verdict = authorize(f"Bearer {token}", ["super_admin", "kam"])
    assert verdict.authorized
    assert verdict.user.role == "kam"


def test_password_hashing(db) -> None:
    hashed = hash_password("hunter22")

    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("hunter22", "plain-text")
    assert not verify_password("hunter22", None)


def test_login_returns_token_for_active_user(api_client, kam, district) -> None:
    response = api_client.post("/api/auth/login", json={"email": "KAM@example.com", "password": PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["role"] == "kam"
    assert body["data"]["user"]["district_id"] == str(district["_id"])

    identity = verify_token(body["data"]["token"])
    assert identity.user_id == str(kam["_id"])
    assert identity.district_id == str(district["_id"])


def test_login_failures(api_client, kam) -> None:
    response = api_client.post("/api/auth/login", json={"email": "kam@example.com"})
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Email and password are required"

    response = api_client.post("/api/auth/login", json={"email": "kam@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"]["message"] == "Invalid email or password"

    response = api_client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert response.status_code == 401


def test_login_refuses_inactive_account(api_client, kam) -> None:
    users_repo.set_user_status(kam["_id"], "inactive")

    response = api_client.post("/api/auth/login", json={"email": "kam@example.com", "password": PASSWORD})

    assert response.status_code == 403
    assert response.json()["error"]["message"] == "Your account has been deactivated"


def test_distributor_login_carries_city(api_client, distributor) -> None:
    city_id = ObjectId()
    distributors_repo.update_distributor(distributor["_id"], {"city_id": city_id})

    response = api_client.post("/api/auth/distributor-login", json={"email": "dist@example.com", "password": PASSWORD})

    assert response.status_code == 200
    identity = verify_token(response.json()["data"]["token"])
    assert identity.role == "distributor"
    assert identity.city_id == str(city_id)


def test_me_expands_assigned_district(api_client, kam_headers, district) -> None:
    response = api_client.get("/api/auth/me", headers=kam_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "kam@example.com"
    assert "password" not in data
    assert data["assigned_district"]["name"] == "Lahore Central"
    assert data["assigned_district"]["code"] == "LHR"


def test_me_requires_token(api_client) -> None:
    response = api_client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": {"message": "No token provided"}}


def test_me_for_unknown_account_is_404(api_client) -> None:
    response = api_client.get("/api/auth/me", headers=bearer("super_admin"))

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "User not found"
