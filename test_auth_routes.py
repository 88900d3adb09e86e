from types import SimpleNamespace

import pytest
from sqlmodel import Session, select

import core.deps
from models.user import User, UserRole


@pytest.fixture
def firebase_tokens(monkeypatch):
    """Stand-in for Firebase token verification: maps bearer tokens to claims."""
    tokens = {
        "good-token": {
            "uid": "nurse-42",
            "email": "nurse42@hospital.test",
            "name": "Nora Nightshift",
            "picture": "https://img.test/nora.png",
        },
    }

    def verify(token):
        if token not in tokens:
            raise ValueError("Token expired")
        return tokens[token]

    monkeypatch.setattr(core.deps, "verify_id_token", verify)
    return tokens


def test_first_login_registers_worker(client, session, firebase_tokens):
    response = client.get("/auth/user", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 200
    assert response.json()["id"] == "nurse-42"
    assert response.json()["role"] == "worker"
    user = session.exec(select(User).where(User.id == "nurse-42")).one()
    assert user.display_name == "Nora Nightshift"
    assert user.profile_image_url == "https://img.test/nora.png"


def test_login_keeps_existing_role(client, session, firebase_tokens):
    session.add(User(id="nurse-42", email="old@hospital.test", role=UserRole.MANAGER))
    session.commit()

    response = client.get("/auth/user", headers={"Authorization": "Bearer good-token"})

    assert response.json()["role"] == "manager"
    assert response.json()["email"] == "nurse42@hospital.test"


@pytest.mark.parametrize(
    "headers",
    [{}, {"Authorization": "Token good-token"}, {"Authorization": "Bearer stale-token"}],
)
def test_bad_credentials(client, firebase_tokens, headers):
    response = client.get("/auth/user", headers=headers)

    assert response.status_code == 401


def test_token_without_uid(client, firebase_tokens):
    firebase_tokens["anon-token"] = {"email": "ghost@hospital.test"}

    response = client.get("/auth/user", headers={"Authorization": "Bearer anon-token"})

    assert response.status_code == 401


def test_self_service_role_change(login, session, worker):
    client = login(worker)

    response = client.post("/auth/role", json={"role": "manager"})

    assert response.status_code == 200
    assert response.json()["role"] == "manager"
    session.expire_all()
    assert session.get(User, worker.id).role == UserRole.MANAGER


def test_role_change_rejects_unknown_roles(login, worker):
    response = login(worker).post("/auth/role", json={"role": "admin"})

    assert response.status_code == 422


def test_parallel_first_requests_register_user_once(engine, session, firebase_tokens, monkeypatch):
    request = SimpleNamespace(headers={"Authorization": "Bearer good-token"})
    lookup = session.get
    interleaved = []

    # A parallel request registers the same user after this one found no row
    def get_after_parallel_registration(entity, ident, **kwargs):
        found = lookup(entity, ident, **kwargs)
        if not interleaved:
            interleaved.append(ident)
            with Session(engine) as other:
                core.deps.get_current_user(request, other)
        return found

    monkeypatch.setattr(session, "get", get_after_parallel_registration)

    caller = core.deps.get_current_user(request, session)

    assert caller["uid"] == "nurse-42"
    assert caller["role"] == "worker"
    monkeypatch.undo()
    users = session.exec(select(User).where(User.id == "nurse-42")).all()
    assert len(users) == 1
    assert users[0].email == "nurse42@hospital.test"


def test_email_already_held_by_another_account(client, session, firebase_tokens):
    session.add(User(id="nurse-legacy", email="nurse42@hospital.test"))
    session.commit()

    response = client.get("/auth/user", headers={"Authorization": "Bearer good-token"})

    assert response.status_code == 200
    assert response.json()["id"] == "nurse-42"
    assert response.json()["email"] is None
    session.expire_all()
    assert session.get(User, "nurse-legacy").email == "nurse42@hospital.test"
