# app/routers/categories.py
from fastapi import APIRouter
from app.schemas.report import CategoryOut
from app.services.categories import CATEGORIES

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=list[CategoryOut])
def list_categories():
    return CATEGORIES
