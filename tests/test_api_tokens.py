"""API token lifecycle tests: generation, verification, revocation and expiry."""

from datetime import timedelta
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from menu_portal.db import session as db_session
from menu_portal.db.base import Base
from menu_portal.main import app
from menu_portal.models import ApiToken, Property, Restaurant
from menu_portal.services.token_service import hash_token
from menu_portal.utils.time import utcnow


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _use_test_database(tmp_path: Path, monkeypatch, name: str) -> sessionmaker:
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    return testing_session_local


def _auth_headers(client: TestClient, email: str, role: str = "SuperAdmin") -> dict[str, str]:
    response = client.post(
        "/api/auth/register",
        json={"name": email.split("@")[0], "email": email, "password": "secret123", "role": role},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}


def _seed_restaurant(testing_session_local: sessionmaker) -> str:
    with testing_session_local() as setup_session:
        prop = Property(name="Seaside")
        setup_session.add(prop)
        setup_session.flush()
        restaurant = Restaurant(property_id=prop.id, name="Blue Fin")
        setup_session.add(restaurant)
        setup_session.commit()
        return restaurant.id


def test_generated_token_is_shown_once_and_stored_hashed(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_token_generate.db")
    restaurant_id = _seed_restaurant(testing_session_local)

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com")
        created = client.post(
            "/api/api-tokens",
            json={"name": "Kitchen display", "restaurantId": restaurant_id, "expiresInDays": 30},
            headers=headers,
        )
        listed = client.get("/api/api-tokens", headers=headers)

    assert created.status_code == 201
    data = created.json()["data"]
    raw_token = data["token"]
    assert raw_token.startswith("tb_")
    assert len(raw_token) == 3 + 64
    assert data["tokenPreview"] == f"{raw_token[:12]}...{raw_token[-4:]}"
    assert data["expiresAt"] is not None

    listed_tokens = listed.json()["data"]
    assert len(listed_tokens) == 1
    assert "token" not in listed_tokens[0]

    with testing_session_local() as verify_session:
        stored = verify_session.get(ApiToken, data["id"])
        assert stored.token_hash == hash_token(raw_token)
        assert stored.token_hash != raw_token


def test_token_name_is_required(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "test_token_name.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com")
        response = client.post("/api/api-tokens", json={"name": "  "}, headers=headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Token name is required"


def test_only_superadmin_manages_tokens(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "test_token_roles.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "admin@example.com", role="Admin")
        response = client.post("/api/api-tokens", json={"name": "Nope"}, headers=headers)

    assert response.status_code == 403


def test_verify_accepts_api_tokens_and_stamps_usage(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_token_verify.db")
    restaurant_id = _seed_restaurant(testing_session_local)

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com")
        created = client.post("/api/api-tokens", json={"name": "Board", "restaurantId": restaurant_id}, headers=headers)
        token_data = created.json()["data"]
        token_headers = {"Authorization": f"Bearer {token_data['token']}"}

        verified = client.get("/api/api-tokens/verify", headers=token_headers)
        session_verify = client.get("/api/api-tokens/verify", headers=headers)
        me = client.get("/api/auth/me", headers=token_headers)

    assert verified.status_code == 200
    assert verified.json()["data"]["valid"] is True
    assert verified.json()["data"]["restaurantId"] == restaurant_id
    assert session_verify.status_code == 403
    assert me.json()["data"]["kind"] == "api_token"

    with testing_session_local() as verify_session:
        stored = verify_session.get(ApiToken, token_data["id"])
        assert stored.last_used_at is not None


def test_revoked_token_is_rejected_until_reactivated(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "test_token_revoke.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com")
        token_data = client.post("/api/api-tokens", json={"name": "Temp"}, headers=headers).json()["data"]
        token_headers = {"Authorization": f"Bearer {token_data['token']}"}

        revoked = client.patch(f"/api/api-tokens/{token_data['id']}/revoke", headers=headers)
        after_revoke = client.get("/api/api-tokens/verify", headers=token_headers)
        client.patch(f"/api/api-tokens/{token_data['id']}/activate", headers=headers)
        after_activate = client.get("/api/api-tokens/verify", headers=token_headers)
        deleted = client.delete(f"/api/api-tokens/{token_data['id']}", headers=headers)
        after_delete = client.get("/api/api-tokens/verify", headers=token_headers)

    assert revoked.json()["data"]["isActive"] is False
    assert after_revoke.status_code == 401
    assert after_activate.status_code == 200
    assert deleted.status_code == 200
    assert after_delete.status_code == 401


def test_expired_token_is_forbidden(tmp_path: Path, monkeypatch) -> None:
    testing_session_local = _use_test_database(tmp_path, monkeypatch, "test_token_expired.db")

    with TestClient(app) as client:
        headers = _auth_headers(client, "root@example.com")
        token_data = client.post(
            "/api/api-tokens", json={"name": "Short", "expiresInDays": 1}, headers=headers
        ).json()["data"]

        with testing_session_local() as setup_session:
            stored = setup_session.get(ApiToken, token_data["id"])
            stored.expires_at = utcnow() - timedelta(minutes=1)
            setup_session.commit()

        response = client.get("/api/orders", headers={"Authorization": f"Bearer {token_data['token']}"})

    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "API token has expired"}
