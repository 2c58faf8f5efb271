# File: app/routers/reports.py
from datetime import date, datetime
from typing import Optional
from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from sqlalchemy.orm import Session
from app.core.ratelimit import limiter
from app.core.security import CallerSession, get_optional_session
from app.db.session import get_db
from app.schemas.comment import CommentCreate, CommentOut
from app.schemas.report import (
    PaginatedReportsOut,
    ReportCreate,
    ReporterOut,
    ReportFilters,
    ReportFormOut,
    ReportOut,
    ReportStatusPatch,
    ReportUpdate,
    Status,
    UpvoteOut,
)
from app.services import comments as comment_service
from app.services import reports as report_service

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=ReportOut, status_code=201)
@limiter.limit("10/minute")
def create_report(
    request: Request,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    report_date: Optional[datetime] = Form(None),
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    data = ReportCreate(
        title=title,
        description=description,
        category=category,
        location=location,
        report_date=report_date,
    )
    report = report_service.create_report(db, caller, data)
    return report_service.to_report_out(report)


@router.get("", response_model=PaginatedReportsOut)
@limiter.limit("60/minute")
def list_reports(
    request: Request,
    db: Session = Depends(get_db),
    category: Optional[str] = Query(default=None),
    status: Optional[Status] = Query(default=None),
    reporter: Optional[str] = Query(default=None),
    start: Optional[datetime] = Query(default=None),
    end: Optional[datetime] = Query(default=None),
    on: Optional[date] = Query(default=None, description="Restrict to a single day"),
    page: int = Query(default=1, ge=1),
    per_page: Optional[int] = Query(default=None, ge=1, le=100),
):
    filters = ReportFilters(
        category=category,
        status=status,
        reporter=reporter,
        start=start,
        end=end,
        on=on,
        page=page,
        per_page=per_page,
    )
    return report_service.list_reports(db, filters)


@router.get("/reporters", response_model=list[ReporterOut])
def list_reporters(db: Session = Depends(get_db)):
    return report_service.list_reporters(db)


@router.get("/{report_id}", response_model=ReportFormOut)
def get_report(
    report_id: int,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    report = report_service.get_report(db, caller, report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Not found")
    return ReportFormOut(
        id=report.id,
        title=report.title,
        description=report.description,
        category=report.category,
        report_date=report.created_at,
    )


@router.patch("/{report_id}", response_model=ReportOut)
def edit_report(
    report_id: int,
    body: ReportUpdate,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    report = report_service.edit_report(db, caller, report_id, body)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report_service.to_report_out(report, report_service.comment_count(db, report.id))


@router.delete("/{report_id}")
def delete_report(
    report_id: int,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    report_service.delete_report(db, caller, report_id)
    return {"ok": True}


@router.post("/{report_id}/upvote", response_model=UpvoteOut)
def toggle_upvote(
    report_id: int,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    report, upvoted = report_service.toggle_upvote(db, caller, report_id)
    return UpvoteOut(id=report.id, upvotes=report.upvotes, upvoted=upvoted)


@router.patch("/{report_id}/status", response_model=ReportOut)
def update_status(
    report_id: int,
    body: ReportStatusPatch,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    report = report_service.update_status(db, caller, report_id, body.status)
    return report_service.to_report_out(report, report_service.comment_count(db, report.id))


@router.get("/{report_id}/comments", response_model=list[CommentOut])
def list_comments(report_id: int, db: Session = Depends(get_db)):
    return [comment_service.to_comment_out(c) for c in comment_service.list_comments(db, report_id)]


@router.post("/{report_id}/comments", response_model=CommentOut, status_code=201)
@limiter.limit("20/minute")
def add_comment(
    request: Request,
    report_id: int,
    body: CommentCreate,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    comment = comment_service.add_comment(db, caller, report_id, body)
    return comment_service.to_comment_out(comment)
