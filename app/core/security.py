# app/core/security.py
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time, jwt
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.errors import Unauthenticated, Forbidden
from passlib.hash import bcrypt_sha256
from app.db.session import get_db
from app.models.user import User, UserRole

ALGO = "HS256"
ACCESS_TTL = 15 * 60
REFRESH_TTL = 7 * 24 * 3600
bearer = HTTPBearer(auto_error=False)


class CallerSession(BaseModel):
    """Resolved identity of the current caller. Anonymous callers get ``None`` instead."""
    model_config = ConfigDict(frozen=True)

    user_id: int
    user_name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @classmethod
    def from_user(cls, user: User) -> "CallerSession":
        return cls(user_id=user.id, user_name=user.name or "Anonymous", role=user.role)


def hash_password(raw: str) -> str:
    return bcrypt_sha256.hash(raw)

def verify_password(raw: str, hashed: str) -> bool:
    return bcrypt_sha256.verify(raw, hashed)

def _make_token(sub: str, role: str, ttl: int) -> str:
    now = int(time.time())
    payload = {"sub": sub, "role": role, "iat": now, "exp": now + ttl}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)

def make_tokens(email: str, role: str) -> dict:
    return {
        "access_token": _make_token(email, role, ACCESS_TTL),
        "refresh_token": _make_token(email, role, REFRESH_TTL),
        "token_type": "bearer",
        "expires_in": ACCESS_TTL,
    }

def resolve_session(creds: Optional[HTTPAuthorizationCredentials], db: Session) -> Optional[CallerSession]:
    if not creds:
        return None
    try:
        payload = jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.PyJWTError:
        return None
    email = payload.get("sub")
    if not email:
        return None
    user = db.query(User).filter(User.email == email).first()
    if not user or not user.is_active:
        return None
    # role comes from the store so demotions apply before token expiry
    return CallerSession.from_user(user)

def get_optional_session(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
                         db: Session = Depends(get_db)) -> Optional[CallerSession]:
    return resolve_session(creds, db)

def get_current_session(session: Optional[CallerSession] = Depends(get_optional_session)) -> CallerSession:
    if session is None:
        raise Unauthenticated()
    return session

def require_session(session: Optional[CallerSession]) -> CallerSession:
    if session is None:
        raise Unauthenticated()
    return session

def require_role(*roles):
    role_values = [r.value if isinstance(r, UserRole) else r for r in roles]
    def _dep(session: CallerSession = Depends(get_current_session)):
        if session.role.value not in role_values:
            raise Forbidden()
        return session
    return _dep
