# File: app/routers/dashboard.py
# Member area: the authorization gate admits any signed-in caller.
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from app.core.security import CallerSession, get_current_session
from app.db.session import get_db
from app.models.comment import Comment
from app.models.report import Report
from app.schemas.report import ReportOut
from app.services.reports import to_report_out

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

@router.get("/reports", response_model=list[ReportOut])
def my_reports(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    me: CallerSession = Depends(get_current_session),
):
    rows = (
        db.query(Report)
        .options(selectinload(Report.upvoters), selectinload(Report.comments))
        .filter(Report.user_id == me.user_id)
        .order_by(Report.created_at.desc(), Report.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [to_report_out(r, len(r.comments)) for r in rows]

@router.get("/summary")
def my_summary(db: Session = Depends(get_db), me: CallerSession = Depends(get_current_session)):
    reports = db.query(func.count(Report.id)).filter(Report.user_id == me.user_id).scalar() or 0
    upvotes = db.query(func.coalesce(func.sum(Report.upvotes), 0)).filter(Report.user_id == me.user_id).scalar()
    comments = db.query(func.count(Comment.id)).filter(Comment.author_id == me.user_id).scalar() or 0
    return {"reports": reports, "upvotes_received": int(upvotes or 0), "comments": comments}
