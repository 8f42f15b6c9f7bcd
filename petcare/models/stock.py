from typing import Optional, Annotated
from beanie import Document, Indexed
from pydantic import Field
from datetime import datetime
from enum import Enum


class Stock(Document):
    """
    Quantity of one product batch held at one branch.
    A product can have several rows per branch (one per batch).
    """
    id: int

    product_id: Annotated[int, Indexed()]
    branch_id: Annotated[int, Indexed()]

    quantity: int = 0
    batch_number: Optional[str] = None
    expiry_date: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "stock"
        indexes = [
            [("product_id", 1), ("branch_id", 1)]
        ]


class AdjustmentType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    DAMAGE = "damage"
    EXPIRED = "expired"
    CORRECTION = "correction"


class StockAdjustment(Document):
    """Audit trail for manual stock changes (damage, expiry, recounts)."""
    id: int

    stock_id: int
    product_id: int
    branch_id: int
    user_id: int

    adjustment_type: AdjustmentType
    quantity: int
    previous_quantity: int
    new_quantity: int
    reason: Optional[str] = None
    batch_number: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "stock_adjustments"
