"""Report operations.

Every mutating operation authorizes the caller first and then runs as a single
unit of work on the request's ``Session``. Upvote toggles never compute the
counter in Python: membership rows and the ``upvotes`` column are changed by
SQL statements inside one transaction, with the report row locked where the
dialect supports ``FOR UPDATE``.
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, time, timezone
from typing import Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.core.errors import Forbidden, NotFound, ValidationError
from app.core.security import CallerSession, require_session
from app.models.comment import Comment
from app.models.report import Report, ReportStatus, ReportUpvote
from app.schemas.report import (
    PaginatedReportsOut,
    ReportCreate,
    ReporterOut,
    ReportFilters,
    ReportOut,
    ReportUpdate,
)
from app.services.categories import is_known_category

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100


def _required(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


def _known_category(value: Optional[str]) -> str:
    category = _required(value, "category")
    if not is_known_category(category):
        raise ValidationError(f"Unknown category: {category}")
    return category


def _can_modify(caller: CallerSession, report: Report) -> bool:
    return caller.is_admin or report.user_id == caller.user_id


def _commit(db: Session, what: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("store failure during %s", what, exc_info=True)
        raise


def to_report_out(report: Report, comment_count: int = 0) -> ReportOut:
    return ReportOut(
        id=report.id,
        title=report.title,
        description=report.description,
        category=report.category,
        status=report.status.value,
        location=report.location,
        created_at=report.created_at,
        user_id=report.user_id,
        user_name=report.user_name,
        upvotes=report.upvotes,
        user_upvoted=sorted(report.user_upvoted),
        comment_count=comment_count,
    )


def comment_count(db: Session, report_id: int) -> int:
    return db.query(func.count(Comment.id)).filter(Comment.issue_id == report_id).scalar() or 0


def create_report(db: Session, caller: Optional[CallerSession], data: ReportCreate) -> Report:
    caller = require_session(caller)
    title = _required(data.title, "title")
    description = _required(data.description, "description")
    category = _known_category(data.category)

    report = Report(
        title=title,
        description=description,
        category=category,
        location=(data.location or "").strip(),
        status=ReportStatus.open,
        created_at=data.report_date or datetime.now(timezone.utc),
        user_id=caller.user_id,
        user_name=caller.user_name,
        upvotes=0,
    )
    db.add(report)
    _commit(db, "create_report")
    db.refresh(report)
    logger.info("report %s created by user %s", report.id, caller.user_id)
    return report


def get_report(db: Session, caller: Optional[CallerSession], report_id: int) -> Optional[Report]:
    require_session(caller)
    return db.query(Report).filter(Report.id == report_id).first()


def edit_report(
    db: Session, caller: Optional[CallerSession], report_id: int, data: ReportUpdate
) -> Optional[Report]:
    caller = require_session(caller)
    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        return None
    if not _can_modify(caller, report):
        logger.warning("user %s denied edit of report %s", caller.user_id, report_id)
        raise Forbidden("You cannot edit this report.")

    fields = data.model_fields_set
    if "title" in fields:
        report.title = _required(data.title, "title")
    if "description" in fields:
        report.description = _required(data.description, "description")
    if "category" in fields:
        report.category = _known_category(data.category)
    if "report_date" in fields and data.report_date is not None:
        report.created_at = data.report_date

    _commit(db, "edit_report")
    db.refresh(report)
    logger.info("report %s edited by user %s", report_id, caller.user_id)
    return report


def delete_report(db: Session, caller: Optional[CallerSession], report_id: int) -> None:
    caller = require_session(caller)
    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        raise NotFound("Report not found")
    if not _can_modify(caller, report):
        logger.warning("user %s denied delete of report %s", caller.user_id, report_id)
        raise Forbidden("Forbidden: You cannot delete this report.")

    # relationship cascades remove comments, their likes and the upvote rows
    db.delete(report)
    _commit(db, "delete_report")
    logger.info("report %s deleted by user %s", report_id, caller.user_id)


def toggle_upvote(db: Session, caller: Optional[CallerSession], report_id: int) -> tuple[Report, bool]:
    """Flip the caller's upvote. Returns the refreshed report and whether it is now upvoted."""
    caller = require_session(caller)
    try:
        report = (
            db.query(Report)
            .filter(Report.id == report_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not report:
            raise NotFound("Report not found")

        removed = db.execute(
            delete(ReportUpvote).where(
                ReportUpvote.report_id == report_id,
                ReportUpvote.user_id == caller.user_id,
            )
        ).rowcount
        if removed:
            delta = -1
        else:
            db.execute(insert(ReportUpvote).values(report_id=report_id, user_id=caller.user_id))
            delta = 1
        db.execute(
            update(Report)
            .where(Report.id == report_id)
            .values(upvotes=Report.upvotes + delta)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("upvote toggle failed for report %s", report_id, exc_info=True)
        raise
    except NotFound:
        db.rollback()
        raise

    db.refresh(report)
    db.expire(report, ["upvoters"])
    return report, delta > 0


def update_status(
    db: Session, caller: Optional[CallerSession], report_id: int, new_status: str
) -> Report:
    caller = require_session(caller)
    if not caller.is_admin:
        logger.warning("user %s denied status change of report %s", caller.user_id, report_id)
        raise Forbidden("Only admins can update status")
    try:
        status = ReportStatus(new_status)
    except ValueError:
        raise ValidationError("Invalid status")

    report = db.query(Report).filter(Report.id == report_id).first()
    if not report:
        raise NotFound("Report not found")

    # any status may move to any other; resolved reports can be reopened
    report.status = status
    _commit(db, "update_status")
    db.refresh(report)
    logger.info("report %s status -> %s by user %s", report_id, status.value, caller.user_id)
    return report


def _filtered(db: Session, filters: ReportFilters):
    q = db.query(Report)
    if filters.category:
        q = q.filter(Report.category == filters.category)
    if filters.status:
        q = q.filter(Report.status == ReportStatus(filters.status))
    if filters.reporter:
        q = q.filter(func.lower(Report.user_name).contains(filters.reporter.lower()))
    if filters.on:
        q = q.filter(
            Report.created_at >= datetime.combine(filters.on, time.min),
            Report.created_at <= datetime.combine(filters.on, time.max),
        )
    if filters.start:
        q = q.filter(Report.created_at >= filters.start)
    if filters.end:
        q = q.filter(Report.created_at <= filters.end)
    return q


def list_reports(db: Session, filters: ReportFilters) -> PaginatedReportsOut:
    per_page = min(filters.per_page or settings.reports_per_page, MAX_PER_PAGE)
    q = _filtered(db, filters)
    total = q.count()
    total_pages = max(1, math.ceil(total / per_page))
    page = min(filters.page, total_pages)

    rows = (
        q.options(selectinload(Report.upvoters))
        .order_by(Report.created_at.desc(), Report.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    counts = {}
    if rows:
        counts = dict(
            db.execute(
                select(Comment.issue_id, func.count(Comment.id))
                .where(Comment.issue_id.in_([r.id for r in rows]))
                .group_by(Comment.issue_id)
            ).all()
        )
    return PaginatedReportsOut(
        items=[to_report_out(r, counts.get(r.id, 0)) for r in rows],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        has_active_filters=filters.active,
    )


def list_reporters(db: Session) -> list[ReporterOut]:
    rows = (
        db.query(Report.user_id, func.max(Report.user_name))
        .group_by(Report.user_id)
        .order_by(func.max(Report.user_name))
        .all()
    )
    return [ReporterOut(id=uid, name=name or "Unknown") for uid, name in rows]
