from beanie import Document, Indexed
from pydantic import Field
from typing import Annotated, Optional
from enum import Enum
from datetime import datetime


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"

class User(Document):
    id: int

    # Login identity: either the username or the email
    username: Annotated[str, Indexed(unique=True)]
    email: Optional[str] = None
    full_name: str

    password_hash: str
    role: UserRole = UserRole.CASHIER
    branch_id: Optional[int] = None   # None = head office / all branches
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Settings:
        name = "users"
