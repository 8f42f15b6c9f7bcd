from typing import Annotated, Optional
from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime

class Branch(Document):
    id: int

    name: str
    # Unique branch code, e.g. "CHN-01"
    code: Annotated[str, Indexed(unique=True)]
    address: str = ""
    phone: str = ""
    opening_hours: Optional[str] = None
    status: str = "active"  # active | inactive | maintenance

    manager_id: Optional[int] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = "branches"
