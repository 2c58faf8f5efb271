from app.models.user import User, UserRole
from app.models.report import Report, ReportStatus, ReportUpvote
from app.models.comment import Comment, CommentLike

__all__ = [
    "User",
    "UserRole",
    "Report",
    "ReportStatus",
    "ReportUpvote",
    "Comment",
    "CommentLike",
]
