"""
Tests de perfil de usuario y administración (aprobación, roles, borrado).
"""

from recipe_ai_core.db.helpers import get_user_by_id, seed_admin
from recipe_ai_core.db.recipes import get_recipe, rate_recipe
from recipe_ai_core.security import verify_password


def test_status(client, pending_user, auth_headers):
    resp = client.get("/api/v1/user/status", headers=auth_headers(pending_user))
    assert resp.status_code == 200
    assert resp.json() == {"is_approved": False}


def test_update_display_name(client, user, auth_headers):
    resp = client.put("/api/v1/user/profile", json={"display_name": "Ana María"}, headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["user"]["display_name"] == "Ana María"


def test_change_email_requires_current_password(client, user, auth_headers):
    resp = client.put("/api/v1/user/profile", json={"email": "ana2@example.com"}, headers=auth_headers(user))
    assert resp.status_code == 400

    wrong = client.put(
        "/api/v1/user/profile",
        json={"email": "ana2@example.com", "current_password": "mala"},
        headers=auth_headers(user),
    )
    assert wrong.status_code == 401

    ok = client.put(
        "/api/v1/user/profile",
        json={"email": "ana2@example.com", "current_password": "secret123"},
        headers=auth_headers(user),
    )
    assert ok.status_code == 200
    assert user.email == "ana2@example.com"


def test_change_email_to_taken_address(client, user, other_user, auth_headers):
    resp = client.put(
        "/api/v1/user/profile",
        json={"email": "bruno@example.com", "current_password": "secret123"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 409


def test_change_password(client, user, auth_headers):
    resp = client.put(
        "/api/v1/user/profile",
        json={"new_password": "nueva123", "current_password": "secret123"},
        headers=auth_headers(user),
    )
    assert resp.status_code == 200
    assert verify_password("nueva123", user.password_hash)


def test_theme(client, user, auth_headers):
    resp = client.put("/api/v1/user/theme", json={"theme": "dark"}, headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["theme"] == "dark"

    bad = client.put("/api/v1/user/theme", json={"theme": "pink"}, headers=auth_headers(user))
    assert bad.status_code == 400


def test_admin_endpoints_reject_non_admins(client, user, auth_headers):
    assert client.get("/api/v1/admin/users").status_code == 401
    assert client.get("/api/v1/admin/users", headers=auth_headers(user)).status_code == 401


def test_admin_lists_and_approves(client, admin, pending_user, auth_headers):
    resp = client.get("/api/v1/admin/users", headers=auth_headers(admin))
    assert resp.status_code == 200
    emails = {u["email"] for u in resp.json()}
    assert emails == {"admin@example.com", "carla@example.com"}

    approve = client.put(f"/api/v1/admin/users/{pending_user.id}/approve", headers=auth_headers(admin))
    assert approve.status_code == 200
    assert approve.json()["user"]["is_approved"] is True


def test_admin_approve_unknown_user(client, admin, auth_headers):
    resp = client.put("/api/v1/admin/users/no-existe/approve", headers=auth_headers(admin))
    assert resp.status_code == 404


def test_admin_sets_roles(client, admin, user, auth_headers):
    resp = client.put(
        f"/api/v1/admin/users/{user.id}/roles",
        json={"new_roles": ["user", "admin", "admin"]},
        headers=auth_headers(admin),
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["roles"] == ["user", "admin"]
    assert user.is_admin

    bad = client.put(
        f"/api/v1/admin/users/{user.id}/roles",
        json={"new_roles": "admin"},
        headers=auth_headers(admin),
    )
    assert bad.status_code == 400


def test_admin_deletes_user_and_keeps_recipes(client, db_session, admin, user, other_user, make_recipe, auth_headers):
    own = make_recipe(user, title="De Ana")
    rated = make_recipe(other_user, title="De Bruno")
    rate_recipe(db_session, rated.id, user, 4)
    rate_recipe(db_session, rated.id, other_user, 2)
    user_id = user.id

    resp = client.delete(f"/api/v1/admin/users/{user_id}", headers=auth_headers(admin))
    assert resp.status_code == 200

    assert get_user_by_id(db_session, user_id) is None
    assert get_recipe(db_session, own.id).created_by is None
    rated = get_recipe(db_session, rated.id)
    assert rated.num_ratings == 1
    assert rated.average_rating == 2.0


def test_seed_admin_only_once(db_session):
    result = seed_admin(db_session)
    assert result is not None
    user, password = result
    assert user.is_admin and user.is_approved
    assert len(password) == 8
    assert verify_password(password, user.password_hash)

    assert seed_admin(db_session) is None
