from beanie import Document
from pydantic import Field
from typing import Optional
from datetime import datetime
from enum import Enum


class DeliveryType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Orders still waiting on the branch
OPEN_ORDER_STATUSES = [OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING]


class OnlineOrder(Document):
    """
    Storefront order placed by a customer.
    Items are kept as a denormalized JSON string, not child documents.
    """
    id: int
    order_number: str
    customer_id: int
    branch_id: int

    items_json: str = "[]"

    subtotal: float
    gst_amount: float = 0.0
    delivery_charge: float = 0.0
    grand_total: float

    delivery_type: DeliveryType = DeliveryType.PICKUP
    delivery_address: str = ""
    payment_method: str = "cash"    # cash | online | upi
    payment_status: str = "pending"
    status: OrderStatus = OrderStatus.PENDING
    notes: str = ""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "online_orders"
