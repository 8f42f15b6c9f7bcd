from beanie import Document
from pydantic import Field
from typing import Optional
from datetime import datetime

class Category(Document):
    id: int
    name: str
    slug: str                       # e.g., "dog-food"
    description: Optional[str] = None
    icon: Optional[str] = "🐾"
    color: Optional[str] = None     # Badge colour used by the POS grid

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "categories"
