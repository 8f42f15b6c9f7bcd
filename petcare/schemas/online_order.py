from pydantic import BaseModel
from typing import List, Optional
from petcare.models.online_order import DeliveryType, OrderStatus
from petcare.schemas.sale import CartLine


class OnlineOrderCreate(BaseModel):
    items: List[CartLine] = []
    branch_id: Optional[int] = None
    delivery_type: DeliveryType = DeliveryType.PICKUP
    delivery_address: str = ""
    payment_method: str = "cash"
    notes: str = ""


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
