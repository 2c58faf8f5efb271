from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class CommentCreate(BaseModel):
    text: Optional[str] = None
    reply_to: Optional[str] = None


class CommentOut(BaseModel):
    id: int
    issue_id: int
    text: str
    author: str
    author_id: Optional[int] = None
    date: datetime
    likes: int = 0
    liked_by: List[int] = []
    reply_to: Optional[str] = None

    class Config:
        from_attributes = True


class CommentLikeOut(BaseModel):
    id: int
    likes: int
    liked: bool
