"""Comment operations. Like toggles follow the same discipline as report upvotes."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, insert, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.errors import Forbidden, NotFound, ValidationError
from app.core.security import CallerSession, require_session
from app.models.comment import Comment, CommentLike
from app.models.report import Report
from app.schemas.comment import CommentCreate, CommentOut

logger = logging.getLogger(__name__)


def to_comment_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        issue_id=comment.issue_id,
        text=comment.text,
        author=comment.author,
        author_id=comment.author_id,
        date=comment.date,
        likes=comment.likes,
        liked_by=sorted(comment.liked_by),
        reply_to=comment.reply_to,
    )


def add_comment(
    db: Session, caller: Optional[CallerSession], issue_id: int, data: CommentCreate
) -> Comment:
    caller = require_session(caller)
    text = (data.text or "").strip()
    if not text:
        raise ValidationError("Comment text cannot be empty")
    if not db.query(Report.id).filter(Report.id == issue_id).first():
        raise NotFound("Report not found")

    comment = Comment(
        issue_id=issue_id,
        text=text,
        author=caller.user_name,
        author_id=caller.user_id,
        date=datetime.now(timezone.utc),
        likes=0,
        reply_to=(data.reply_to or "").strip() or None,
    )
    db.add(comment)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("failed to add comment on report %s", issue_id, exc_info=True)
        raise
    db.refresh(comment)
    logger.info("comment %s added to report %s by user %s", comment.id, issue_id, caller.user_id)
    return comment


def list_comments(db: Session, issue_id: int) -> list[Comment]:
    if not db.query(Report.id).filter(Report.id == issue_id).first():
        raise NotFound("Report not found")
    return (
        db.query(Comment)
        .options(selectinload(Comment.likers))
        .filter(Comment.issue_id == issue_id)
        .order_by(Comment.date.asc(), Comment.id.asc())
        .all()
    )


def delete_comment(db: Session, caller: Optional[CallerSession], comment_id: int) -> None:
    caller = require_session(caller)
    comment = db.query(Comment).filter(Comment.id == comment_id).first()
    if not comment:
        raise NotFound("Comment not found")
    if not (caller.is_admin or comment.author_id == caller.user_id):
        logger.warning("user %s denied delete of comment %s", caller.user_id, comment_id)
        raise Forbidden("You cannot delete this comment.")

    db.delete(comment)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("failed to delete comment %s", comment_id, exc_info=True)
        raise
    logger.info("comment %s deleted by user %s", comment_id, caller.user_id)


def toggle_comment_like(
    db: Session, caller: Optional[CallerSession], comment_id: int
) -> tuple[Comment, bool]:
    caller = require_session(caller)
    try:
        comment = (
            db.query(Comment)
            .filter(Comment.id == comment_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not comment:
            raise NotFound("Comment not found")

        removed = db.execute(
            delete(CommentLike).where(
                CommentLike.comment_id == comment_id,
                CommentLike.user_id == caller.user_id,
            )
        ).rowcount
        if removed:
            delta = -1
        else:
            db.execute(insert(CommentLike).values(comment_id=comment_id, user_id=caller.user_id))
            delta = 1
        db.execute(
            update(Comment)
            .where(Comment.id == comment_id)
            .values(likes=Comment.likes + delta)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("like toggle failed for comment %s", comment_id, exc_info=True)
        raise
    except NotFound:
        db.rollback()
        raise

    db.refresh(comment)
    db.expire(comment, ["likers"])
    return comment, delta > 0
