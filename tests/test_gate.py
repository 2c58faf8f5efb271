# tests/test_gate.py
"""Authorization gate: the pure rule and its wiring into requests."""

import pytest
from fastapi import status

from app.core.gate import evaluate_access, is_guarded
from app.core.security import CallerSession
from app.models.user import UserRole

MEMBER = ["/dashboard"]
ADMIN = ["/admin"]
SIGN_IN = "/auth/sign-in"

USER = CallerSession(user_id=1, user_name="Bob", role=UserRole.user)
ADMIN_SESSION = CallerSession(user_id=2, user_name="Ada", role=UserRole.admin)


def decide(path, session):
    return evaluate_access(
        path, session, member_prefixes=MEMBER, admin_prefixes=ADMIN, sign_in_url=SIGN_IN
    )


@pytest.mark.parametrize(
    "path,session,allowed",
    [
        ("/reports", None, True),
        ("/dashboard", None, False),
        ("/dashboard/reports", None, False),
        ("/dashboard/reports", USER, True),
        ("/admin", None, False),
        ("/admin/users", USER, False),
        ("/admin/users", ADMIN_SESSION, True),
        ("/dashboard/summary", ADMIN_SESSION, True),
        ("/administrator", None, True),
        ("/dashboards", None, True),
    ],
)
def test_evaluate_access(path, session, allowed) -> None:
    decision = decide(path, session)
    assert decision.allowed is allowed
    assert decision.redirect_to == (None if allowed else SIGN_IN)


def test_admin_denial_explains_role() -> None:
    assert decide("/admin/users", USER).reason == "admin role required"


def test_is_guarded_ignores_trailing_slash_in_prefix() -> None:
    assert is_guarded("/admin/x", member_prefixes=[], admin_prefixes=["/admin/"])
    assert not is_guarded("/reports/1", member_prefixes=MEMBER, admin_prefixes=ADMIN)


def test_anonymous_member_area_redirects(client) -> None:
    response = client.get("/dashboard/reports", follow_redirects=False)
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    assert response.headers["location"] == SIGN_IN


def test_member_area_allows_any_session(client, other_headers) -> None:
    response = client.get("/dashboard/summary", headers=other_headers, follow_redirects=False)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"reports": 0, "upvotes_received": 0, "comments": 0}


def test_admin_area_redirects_ordinary_user(client, other_headers) -> None:
    response = client.get("/admin/users", headers=other_headers, follow_redirects=False)
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT
    assert response.headers["location"] == SIGN_IN


def test_admin_area_allows_admin(client, admin_headers) -> None:
    response = client.get("/admin/users", headers=admin_headers, follow_redirects=False)
    assert response.status_code == status.HTTP_200_OK


def test_invalid_token_is_treated_as_anonymous(client) -> None:
    response = client.get(
        "/dashboard/reports",
        headers={"Authorization": "Bearer not-a-jwt"},
        follow_redirects=False,
    )
    assert response.status_code == status.HTTP_307_TEMPORARY_REDIRECT


def test_redirect_lands_on_sign_in_hint(client) -> None:
    response = client.get("/dashboard/reports")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["login"] == "/auth/login"


def test_unguarded_paths_pass_through(client) -> None:
    assert client.get("/health").json() == {"ok": True}
