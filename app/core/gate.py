"""Path-based access control for the member and admin areas.

``evaluate_access`` is a pure function over ``(path, session)``. The
``authorization_gate`` dependency wires it into every request and only
touches the session store when the path is actually guarded.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import admin_area_prefixes, member_area_prefixes, settings
from app.core.errors import SignInRequired
from app.core.security import CallerSession, bearer, resolve_session
from app.db.session import get_db


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    redirect_to: Optional[str] = None
    reason: str = ""


ALLOW = GateDecision(allowed=True)


def _under(path: str, prefixes: Iterable[str]) -> bool:
    for prefix in prefixes:
        prefix = prefix.rstrip("/")
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def is_guarded(path: str, *, member_prefixes: Iterable[str], admin_prefixes: Iterable[str]) -> bool:
    return _under(path, member_prefixes) or _under(path, admin_prefixes)


def evaluate_access(
    path: str,
    session: Optional[CallerSession],
    *,
    member_prefixes: Iterable[str],
    admin_prefixes: Iterable[str],
    sign_in_url: str,
) -> GateDecision:
    if _under(path, admin_prefixes):
        if session is None:
            return GateDecision(False, sign_in_url, "no session")
        if not session.is_admin:
            return GateDecision(False, sign_in_url, "admin role required")
        return ALLOW
    if _under(path, member_prefixes) and session is None:
        return GateDecision(False, sign_in_url, "no session")
    return ALLOW


def authorization_gate(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
) -> None:
    path = request.url.path
    members, admins = member_area_prefixes(), admin_area_prefixes()
    if not is_guarded(path, member_prefixes=members, admin_prefixes=admins):
        return
    decision = evaluate_access(
        path,
        resolve_session(creds, db),
        member_prefixes=members,
        admin_prefixes=admins,
        sign_in_url=settings.sign_in_url,
    )
    if not decision.allowed:
        raise SignInRequired(decision.redirect_to, decision.reason)
