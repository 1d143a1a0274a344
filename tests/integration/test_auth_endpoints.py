from __future__ import annotations

import time
from pathlib import Path

import sqlalchemy as sa
from alembic.config import Config
from fastapi.testclient import TestClient

from alembic import command
from apps.api.main import build_auth_service, build_user_management_service, create_app
from carvalue_auth.application.ports.user_repository_port import UserRecord
from carvalue_auth.application.services.auth_service import AuthService
from carvalue_auth.application.services.user_management_service import UserManagementService
from carvalue_auth.infrastructure.security.password_hasher import ScryptPasswordHasher


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    return sync_url, async_url


def _build_client(async_url: str, *, conceal_signin_failure: bool = False) -> TestClient:
    auth_service = build_auth_service(
        async_url,
        conceal_signin_failure=conceal_signin_failure,
    )
    user_management = build_user_management_service(async_url)
    return TestClient(create_app(auth_service=auth_service, user_management=user_management))


def test_signup_returns_id_and_email_and_persists_hash(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "signup_success.db")

    with _build_client(async_url) as client:
        response = client.post(
            "/auth/signup",
            json={"email": "abc1@email.com", "password": "abcdefg"},
        )

    assert response.status_code == 201
    body = response.json()
    assert set(body) == {"id", "email"}
    assert body["email"] == "abc1@email.com"
    assert isinstance(body["id"], int)

    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        stored = connection.execute(
            sa.text("SELECT password FROM users WHERE id = :id"),
            {"id": body["id"]},
        ).scalar_one()
    assert stored != "abcdefg"
    assert ScryptPasswordHasher().verify_password(password="abcdefg", password_hash=stored)


def test_signup_with_email_in_use_returns_400(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "signup_duplicate.db")

    with _build_client(async_url) as client:
        first = client.post("/auth/signup", json={"email": "a@x.com", "password": "secret1"})
        second = client.post("/auth/signup", json={"email": "a@x.com", "password": "secret2"})

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"detail": "email already in use"}


def test_signup_rejects_invalid_body(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "signup_invalid.db")

    with _build_client(async_url) as client:
        response = client.post("/auth/signup", json={"email": "nope", "password": "pw"})

    assert response.status_code == 422


def test_signin_outcomes_are_distinct_by_default(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "signin_distinct.db")

    with _build_client(async_url) as client:
        client.post("/auth/signup", json={"email": "b@x.com", "password": "goodpass"})
        missing = client.post(
            "/auth/signin",
            json={"email": "missing@x.com", "password": "anything"},
        )
        wrong = client.post("/auth/signin", json={"email": "b@x.com", "password": "wrongpass"})
        ok = client.post("/auth/signin", json={"email": "b@x.com", "password": "goodpass"})

    assert missing.status_code == 404
    assert missing.json() == {"detail": "user not found"}
    assert wrong.status_code == 400
    assert wrong.json() == {"detail": "bad password"}
    assert ok.status_code == 200
    assert ok.json()["email"] == "b@x.com"
    assert "password" not in ok.json()


def test_concealed_signin_failures_are_indistinguishable(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "signin_concealed.db")

    with _build_client(async_url, conceal_signin_failure=True) as client:
        client.post("/auth/signup", json={"email": "b@x.com", "password": "goodpass"})
        missing = client.post(
            "/auth/signin",
            json={"email": "missing@x.com", "password": "anything"},
        )
        wrong = client.post("/auth/signin", json={"email": "b@x.com", "password": "wrongpass"})

    assert missing.status_code == wrong.status_code == 401
    assert missing.json() == wrong.json() == {"detail": "invalid credentials"}


def test_corrupted_stored_credential_returns_500_without_leaking_it(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "signin_corrupted.db")
    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        connection.execute(
            sa.text("INSERT INTO users (email, password) VALUES (:email, :password)"),
            {"email": "c@x.com", "password": "corrupted-value"},
        )

    with _build_client(async_url) as client:
        response = client.post("/auth/signin", json={"email": "c@x.com", "password": "pw"})

    assert response.status_code == 500
    assert response.json() == {"detail": "internal credential error"}
    assert "corrupted-value" not in response.text


class _SlowUsers:
    async def find_by_email(self, *, email: str) -> list[UserRecord]:
        _ = email
        return []

    async def save(self, record: UserRecord) -> UserRecord:  # pragma: no cover - not reached
        return record


class _SlowHasher:
    def hash_password(self, password: str) -> str:
        time.sleep(0.5)
        return password

    def verify_password(self, *, password: str, password_hash: str) -> bool:  # pragma: no cover
        _ = (password, password_hash)
        return False


def test_signup_timeout_returns_503() -> None:
    service = AuthService(
        users=_SlowUsers(),
        password_hasher=_SlowHasher(),
        operation_timeout_seconds=0.05,
    )

    app = create_app(
        auth_service=service,
        user_management=UserManagementService(users=_SlowUsers()),
    )

    with TestClient(app) as client:
        response = client.post("/auth/signup", json={"email": "a@x.com", "password": "pw"})

    assert response.status_code == 503
    assert response.json() == {"detail": "credential check timed out, retry later"}


def _post_raw_json(client: TestClient, path: str, body: str):
    return client.post(
        path,
        content=body.encode("ascii"),
        headers={"content-type": "application/json"},
    )


def test_lone_surrogate_password_signs_up_and_signs_in(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "surrogate_password.db")
    body = '{"email": "s@x.com", "password": "\\ud800"}'

    with _build_client(async_url) as client:
        signup = _post_raw_json(client, "/auth/signup", body)
        signin = _post_raw_json(client, "/auth/signin", body)
        wrong = _post_raw_json(
            client,
            "/auth/signin",
            '{"email": "s@x.com", "password": "\\udc00"}',
        )

    assert signup.status_code == 201
    assert signin.status_code == 200
    assert signin.json() == signup.json()
    assert wrong.status_code == 400


def test_lone_surrogate_email_is_rejected_as_invalid_body(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "surrogate_email.db")

    with _build_client(async_url) as client:
        response = _post_raw_json(
            client,
            "/auth/signup",
            '{"email": "a\\ud800@x.com", "password": "pw"}',
        )

    assert response.status_code == 422


def test_user_management_routes_find_update_and_remove(tmp_path: Path) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "user_management.db")

    with _build_client(async_url) as client:
        created = client.post(
            "/auth/signup",
            json={"email": "m@x.com", "password": "pw"},
        ).json()
        user_id = created["id"]

        by_id = client.get(f"/auth/{user_id}")
        by_email = client.get("/auth", params={"email": "m@x.com"})
        no_match = client.get("/auth", params={"email": "nobody@x.com"})
        updated = client.patch(f"/auth/{user_id}", json={"email": "m2@x.com"})
        after_update = client.get("/auth", params={"email": "m2@x.com"})
        removed = client.delete(f"/auth/{user_id}")
        after_remove = client.get(f"/auth/{user_id}")
        remove_again = client.delete(f"/auth/{user_id}")

    assert by_id.status_code == 200
    assert by_id.json() == {"id": user_id, "email": "m@x.com"}
    assert by_email.json() == [{"id": user_id, "email": "m@x.com"}]
    assert no_match.json() == []
    assert updated.status_code == 200
    assert updated.json() == {"id": user_id, "email": "m2@x.com"}
    assert after_update.json() == [{"id": user_id, "email": "m2@x.com"}]
    assert removed.status_code == 200
    assert removed.json() == {"id": user_id, "email": "m2@x.com"}
    assert after_remove.status_code == 404
    assert after_remove.json() == {"detail": "user not found"}
    assert remove_again.status_code == 404

    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        count = connection.execute(sa.text("SELECT COUNT(*) FROM users")).scalar_one()
    assert count == 0


def test_update_user_rejects_email_in_use_and_unknown_id(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_management_conflict.db")

    with _build_client(async_url) as client:
        first = client.post("/auth/signup", json={"email": "a@x.com", "password": "pw"}).json()
        client.post("/auth/signup", json={"email": "b@x.com", "password": "pw"})

        conflict = client.patch(f"/auth/{first['id']}", json={"email": "b@x.com"})
        missing = client.patch("/auth/9999", json={"email": "c@x.com"})
        password_change = client.patch(f"/auth/{first['id']}", json={"password": "new"})

    assert conflict.status_code == 400
    assert conflict.json() == {"detail": "email already in use"}
    assert missing.status_code == 404
    assert password_change.status_code == 422


def test_user_management_responses_never_carry_stored_credential(tmp_path: Path) -> None:
    _, async_url = _upgrade_head(tmp_path, "user_management_shape.db")

    with _build_client(async_url) as client:
        created = client.post("/auth/signup", json={"email": "h@x.com", "password": "pw"}).json()
        responses = [
            client.get(f"/auth/{created['id']}"),
            client.get("/auth", params={"email": "h@x.com"}),
            client.delete(f"/auth/{created['id']}"),
        ]

    for response in responses:
        assert "password" not in response.text
