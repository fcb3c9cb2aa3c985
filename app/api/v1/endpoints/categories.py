# app/api/v1/endpoints/categories.py
# GET  /categories/  -- public list
# POST /categories/  -- admin creates a category

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import require_admin
from app.db.session import get_db
from app.models.course import Category
from app.models.user import User
from app.schemas.course import CategoryCreate, CategoryResponse
from app.services import catalog_service

router = APIRouter()


def _to_response(c: Category) -> CategoryResponse:
    return CategoryResponse(id=c.id, name=c.name, description=c.description)


@router.get("/", response_model=List[CategoryResponse], summary="List categories")
def list_categories(db: Session = Depends(get_db)):
    return [_to_response(c) for c in catalog_service.list_categories(db)]


@router.post("/", response_model=CategoryResponse, status_code=201, summary="Create a category")
def create_category(
    payload: CategoryCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    category = catalog_service.create_category(db, payload.name, payload.description)
    return _to_response(category)
