from typing import Annotated, List, Optional
from datetime import datetime
from enum import Enum
from beanie import Document, Indexed
from pydantic import BaseModel, Field


class POStatus(str, Enum):
    PENDING = "pending"             # Drafted, not yet confirmed with the supplier
    CONFIRMED = "confirmed"         # Supplier accepted
    IN_TRANSIT = "in_transit"       # Goods dispatched
    DELIVERED = "delivered"         # Received into stock (terminal)
    CANCELLED = "cancelled"         # Terminal


# Orders in these states can no longer change
CLOSED_PO_STATUSES = {POStatus.DELIVERED, POStatus.CANCELLED}


class POItem(BaseModel):
    product_id: int
    quantity: int
    received_quantity: int = 0      # Filled during receiving
    unit_price: float
    subtotal: float                 # quantity × unit_price
    batch_number: Optional[str] = None
    expiry_date: Optional[datetime] = None


class PurchaseOrder(Document):
    """Order placed with a supplier for delivery to one branch."""
    id: int

    # e.g. "PO-2026-0007"
    po_number: Annotated[str, Indexed()]

    supplier_id: int
    branch_id: Annotated[int, Indexed()]   # Where the goods are delivered
    user_id: int                           # Who raised it
    items: List[POItem]

    total_amount: float
    gst_amount: float = 0.0
    status: POStatus = POStatus.PENDING

    order_date: datetime = Field(default_factory=datetime.utcnow)
    expected_delivery: Optional[datetime] = None
    received_date: Optional[datetime] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "purchase_orders"
