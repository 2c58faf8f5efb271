# File: app/routers/admin.py
# Admin area: the authorization gate only admits sessions with the admin role.
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.core.security import CallerSession, require_role
from app.models.report import Report, ReportStatus
from app.models.user import User, UserRole
from app.schemas.auth import UserOut, UserPatch

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/reports/summary", dependencies=[Depends(require_role("admin"))])
def reports_summary(db: Session = Depends(get_db)):
    counts = dict(db.query(Report.status, func.count(Report.id)).group_by(Report.status).all())
    out = {s.value: counts.get(s, 0) for s in ReportStatus}
    out["total"] = sum(out.values())
    return out

@router.get("/users", response_model=list[UserOut], dependencies=[Depends(require_role("admin"))])
def list_users(db: Session = Depends(get_db)):
    return [
        UserOut(id=u.id, email=u.email, name=u.name, role=u.role.value, is_active=u.is_active)
        for u in db.query(User).order_by(User.id.desc())
    ]

@router.put("/users/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    body: UserPatch,
    db: Session = Depends(get_db),
    me: CallerSession = Depends(require_role("admin")),
):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(404, "Not found")
    if u.id == me.user_id and (body.is_active is False or body.role not in (None, UserRole.admin.value)):
        raise HTTPException(400, "Admins cannot demote or disable themselves")
    if body.name is not None:
        u.name = body.name.strip()
    if body.is_active is not None:
        u.is_active = body.is_active
    if body.role is not None:
        if body.role not in [x.value for x in UserRole]:
            raise HTTPException(400, "Bad role")
        u.role = UserRole(body.role)
    db.commit(); db.refresh(u)
    logger.info("user %s updated by admin %s", user_id, me.user_id)
    return UserOut(id=u.id, email=u.email, name=u.name, role=u.role.value, is_active=u.is_active)
