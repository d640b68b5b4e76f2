import pytest
from django.contrib.auth.models import User

from accounts.models import UserProfile
from conftest import make_user


@pytest.mark.django_db
def test_login_sets_session_and_returns_role(api):
    make_user("alice", UserProfile.MANAGER)
    resp = api.post("/api/auth/login/", {"username": "alice", "password": "secret1"}, format="json")
    assert resp.status_code == 200
    assert resp.data["role"] == UserProfile.MANAGER
    assert resp.data["name"] == "Alice"

    me = api.get("/api/auth/me/")
    assert me.status_code == 200
    assert me.data["username"] == "alice"


@pytest.mark.django_db
def test_login_rejects_bad_password(api):
    make_user("alice")
    resp = api.post("/api/auth/login/", {"username": "alice", "password": "nope"}, format="json")
    assert resp.status_code == 400
    assert resp.data["error"] == "Invalid credentials"


@pytest.mark.django_db
def test_login_rejects_suspended_account(api):
    make_user("alice", is_active=False)
    resp = api.post("/api/auth/login/", {"username": "alice", "password": "secret1"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_me_requires_session(api):
    resp = api.get("/api/auth/me/")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_logout_ends_session(api):
    make_user("alice")
    api.post("/api/auth/login/", {"username": "alice", "password": "secret1"}, format="json")
    assert api.post("/api/auth/logout/").status_code == 200
    assert api.get("/api/auth/me/").status_code == 401


@pytest.mark.django_db
def test_register_creates_operator(api):
    payload = {
        "username": "new_guy",
        "name": "New Guy",
        "email": "new@example.com",
        "password": "secret1",
        "confirm_password": "secret1",
    }
    resp = api.post("/api/auth/register/", payload, format="json")
    assert resp.status_code == 201
    user = User.objects.get(username="new_guy")
    assert user.profile.role == UserProfile.USER
    assert user.profile.name == "New Guy"
    assert user.check_password("secret1")


@pytest.mark.django_db
def test_register_password_mismatch(api):
    payload = {
        "username": "new_guy",
        "name": "New Guy",
        "password": "secret1",
        "confirm_password": "secret2",
    }
    resp = api.post("/api/auth/register/", payload, format="json")
    assert resp.status_code == 400
    assert "confirm_password" in resp.data


@pytest.mark.django_db
def test_register_field_errors(api):
    resp = api.post(
        "/api/auth/register/",
        {"username": "ab", "name": "A", "password": "123", "confirm_password": "123"},
        format="json",
    )
    assert resp.status_code == 400
    assert {"username", "name", "password"} <= set(resp.data)


@pytest.mark.django_db
def test_register_duplicate_username_conflicts(api):
    make_user("taken")
    payload = {
        "username": "taken",
        "name": "Someone",
        "password": "secret1",
        "confirm_password": "secret1",
    }
    resp = api.post("/api/auth/register/", payload, format="json")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_superuser_gets_admin_profile():
    user = User.objects.create_superuser("root", "root@example.com", "secret1")
    assert user.profile.role == UserProfile.ADMIN
