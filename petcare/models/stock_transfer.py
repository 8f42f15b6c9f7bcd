from beanie import Document, Indexed
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional
from datetime import datetime
from enum import Enum


class TransferStatus(str, Enum):
    PENDING = "pending"              # Requested, awaiting approval
    APPROVED = "approved"            # Ready to ship
    IN_TRANSIT = "in_transit"        # Picked up, on the way
    COMPLETED = "completed"          # Stock moved (terminal)
    CANCELLED = "cancelled"          # Terminal


# Allowed moves; stock only changes on the move to COMPLETED
TRANSFER_TRANSITIONS = {
    TransferStatus.PENDING: {TransferStatus.APPROVED, TransferStatus.CANCELLED},
    TransferStatus.APPROVED: {TransferStatus.IN_TRANSIT, TransferStatus.COMPLETED, TransferStatus.CANCELLED},
    TransferStatus.IN_TRANSIT: {TransferStatus.COMPLETED, TransferStatus.CANCELLED},
    TransferStatus.COMPLETED: set(),
    TransferStatus.CANCELLED: set(),
}


class TransferItem(BaseModel):
    """Individual item in a transfer"""
    product_id: int
    quantity: int
    batch_number: Optional[str] = None


class StockTransfer(Document):
    """
    Stock transfer between branches.
    Workflow: Request → Approve → Ship → Complete
    """
    id: int

    # e.g. "TRF-2026-0003"
    transfer_number: Annotated[str, Indexed()]

    from_branch_id: int
    to_branch_id: int
    user_id: int                     # Who requested it
    items: List[TransferItem]

    status: TransferStatus = TransferStatus.PENDING
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    class Settings:
        name = "stock_transfers"
