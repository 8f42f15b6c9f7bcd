from pydantic import BaseModel, Field
from typing import List, Optional
from petcare.models.stock_transfer import TransferStatus


class TransferItemCreate(BaseModel):
    """Schema for creating transfer items"""
    product_id: int
    quantity: int = Field(..., gt=0, description="Quantity to transfer")
    batch_number: Optional[str] = None


class StockTransferCreate(BaseModel):
    """Schema for creating a new stock transfer"""
    from_branch_id: int
    to_branch_id: int
    items: List[TransferItemCreate]
    notes: Optional[str] = None


class StockTransferStatusUpdate(BaseModel):
    status: TransferStatus
