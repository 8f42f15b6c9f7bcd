from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from petcare.models.stock import AdjustmentType

# Used by: POST /stock (new batch row)
class StockCreate(BaseModel):
    product_id: int
    branch_id: int
    quantity: int = Field(default=0, ge=0)
    batch_number: str = Field(..., min_length=1)
    expiry_date: Optional[datetime] = None

# Used by: PUT /stock/{id}
class StockUpdate(BaseModel):
    quantity: Optional[int] = Field(default=None, ge=0)
    batch_number: Optional[str] = None
    expiry_date: Optional[datetime] = None

# Used by: POST /stock/adjust
class StockAdjustmentSchema(BaseModel):
    product_id: int
    branch_id: Optional[int] = None     # Defaults to the caller's branch
    adjustment_type: AdjustmentType
    quantity: int = Field(..., ge=0, description="Units to add/remove, or the new count for a correction")
    reason: Optional[str] = None
    batch_number: Optional[str] = None
