"""
Reference data for the report form: categories and authorities.
"""

from typing import List

from fastapi import APIRouter, Depends

from civicpulse.database.models.user import User
from civicpulse.middleware.auth import get_current_user
from civicpulse.models.complaint_models import AuthorityResponse, CategoryResponse
from civicpulse.models.report_models import AUTHORITIES, Category

router = APIRouter(prefix="/api/reference", tags=["reference"])


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(current_user: User = Depends(get_current_user)) -> List[CategoryResponse]:
    return [CategoryResponse(value=category.value) for category in Category]


@router.get("/authorities", response_model=List[AuthorityResponse])
async def list_authorities(current_user: User = Depends(get_current_user)) -> List[AuthorityResponse]:
    return [AuthorityResponse(id=a.id, name=a.name) for a in AUTHORITIES]
