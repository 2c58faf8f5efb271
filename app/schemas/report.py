from pydantic import BaseModel, Field
from typing import Optional, Literal, List
from datetime import date, datetime

Status = Literal["open", "in-progress", "resolved"]


class ReportCreate(BaseModel):
    # left optional so missing fields surface as a domain ValidationError
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    report_date: Optional[datetime] = None


class ReportUpdate(BaseModel):
    """Partial edit; only fields present in the request body are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    report_date: Optional[datetime] = None


class ReportStatusPatch(BaseModel):
    # plain str so unknown values reach the service and come back as 400
    status: str


class ReportOut(BaseModel):
    id: int
    title: str
    description: str
    category: str
    status: Status
    location: Optional[str] = None
    created_at: datetime

    user_id: int
    user_name: str

    upvotes: int = 0
    user_upvoted: List[int] = []
    comment_count: int = 0


class ReportFormOut(BaseModel):
    """Fields needed to prefill the edit form."""
    id: int
    title: str
    description: str
    category: str
    report_date: datetime


class PaginatedReportsOut(BaseModel):
    items: list[ReportOut]
    total: int
    page: int
    per_page: int
    total_pages: int
    has_active_filters: bool


class ReportFilters(BaseModel):
    category: Optional[str] = None
    status: Optional[Status] = None
    reporter: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    on: Optional[date] = None
    page: int = Field(default=1, ge=1)
    per_page: Optional[int] = Field(default=None, ge=1, le=100)

    @property
    def active(self) -> bool:
        return any([self.category, self.status, self.reporter, self.start, self.end, self.on])


class UpvoteOut(BaseModel):
    id: int
    upvotes: int
    upvoted: bool


class ReporterOut(BaseModel):
    id: int
    name: str


class CategoryOut(BaseModel):
    id: str
    name: str
    color: str
