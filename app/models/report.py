# File: app/models/report.py
from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Text, Enum, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.base import Base

class ReportStatus(PyEnum):
    open = "open"
    in_progress = "in-progress"
    resolved = "resolved"

# Stored by value so the column holds "in-progress", not the member name.
_status_type = Enum(
    ReportStatus,
    name="report_status",
    native_enum=False,
    length=50,
    values_callable=lambda e: [m.value for m in e],
)

class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), index=True, nullable=False)
    status: Mapped[ReportStatus] = mapped_column(
        _status_type, default=ReportStatus.open, server_default=ReportStatus.open.value, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)

    upvotes: Mapped[int] = mapped_column(Integer, default=0, server_default="0", nullable=False)

    upvoters: Mapped[list["ReportUpvote"]] = relationship(
        back_populates="report", cascade="all, delete-orphan"
    )
    comments: Mapped[list["Comment"]] = relationship(  # noqa: F821
        back_populates="report", cascade="all, delete-orphan", order_by="Comment.date"
    )

    @property
    def user_upvoted(self) -> set[int]:
        return {u.user_id for u in self.upvoters}

class ReportUpvote(Base):
    """One row per (report, user) with an active upvote."""
    __tablename__ = "report_upvotes"

    report_id: Mapped[int] = mapped_column(ForeignKey("reports.id", ondelete="CASCADE"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    report: Mapped[Report] = relationship(back_populates="upvoters")
