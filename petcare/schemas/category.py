from pydantic import BaseModel
from typing import Optional

# Input: What you send to create a category
class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None
    icon: Optional[str] = "🐾"
    color: Optional[str] = None
