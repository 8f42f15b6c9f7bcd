from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from petcare.models.purchase_order import POStatus


# Input for Creating PO
class POItemInput(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)
    batch_number: Optional[str] = None
    expiry_date: Optional[datetime] = None


class POCreateSchema(BaseModel):
    supplier_id: int
    branch_id: int
    items: List[POItemInput]
    expected_delivery: Optional[datetime] = None
    notes: Optional[str] = None


class POStatusUpdate(BaseModel):
    status: POStatus


# Input for Receiving Goods
class ReceivedItemInput(BaseModel):
    product_id: int
    received_quantity: int = Field(ge=0)


class ReceiveGoodsSchema(BaseModel):
    # Omitted: every line is received in full
    items: Optional[List[ReceivedItemInput]] = None
    notes: Optional[str] = None
