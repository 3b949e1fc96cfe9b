# allosports/api/routers/categories.py
from fastapi import APIRouter

from allosports.schemas.article import CATEGORIES

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories():
    """Leagues an article can be filed under."""
    return CATEGORIES
