# designz_loader/schemas/catalog.py

from pydantic import BaseModel, Field
from typing import List, Optional


class SubcategoryRef(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1)


class CategoryNode(BaseModel):
    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    subcategories: List[SubcategoryRef] = []
