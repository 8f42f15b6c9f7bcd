from beanie import Document, Indexed
from pydantic import Field
from typing import Annotated, Optional
from datetime import datetime
from enum import Enum


class CustomerType(str, Enum):
    RETAIL = "retail"
    WHOLESALE = "wholesale"


class Customer(Document):
    id: int

    name: str
    # Phone doubles as the storefront login
    phone: Annotated[str, Indexed()]
    email: str = ""
    address: str = ""

    # None until the customer registers on the storefront
    password_hash: Optional[str] = None

    customer_type: CustomerType = CustomerType.RETAIL
    loyalty_points: int = 0
    total_purchases: float = 0.0
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "customers"
