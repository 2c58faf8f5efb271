# File: app/routers/comments.py
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.core.security import CallerSession, get_optional_session
from app.db.session import get_db
from app.schemas.comment import CommentLikeOut
from app.services import comments as comment_service

router = APIRouter(prefix="/comments", tags=["comments"])


@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    comment_service.delete_comment(db, caller, comment_id)
    return {"success": True}


@router.post("/{comment_id}/like", response_model=CommentLikeOut)
def toggle_like(
    comment_id: int,
    db: Session = Depends(get_db),
    caller: Optional[CallerSession] = Depends(get_optional_session),
):
    comment, liked = comment_service.toggle_comment_like(db, caller, comment_id)
    return CommentLikeOut(id=comment.id, likes=comment.likes, liked=liked)
