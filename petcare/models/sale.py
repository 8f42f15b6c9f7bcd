from beanie import Document, Indexed
from pydantic import Field
from typing import Annotated, Any, Dict, List, Optional
from datetime import datetime
from enum import Enum


class PaymentMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    CREDIT = "credit"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PENDING = "pending"
    PARTIAL = "partial"


class SaleStatus(str, Enum):
    COMPLETED = "completed"
    HOLD = "hold"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class DiscountType(str, Enum):
    AMOUNT = "amount"
    PERCENTAGE = "percentage"


class Sale(Document):
    """
    Main sales transaction record, created at checkout.
    Totals are computed once at creation and never recomputed.
    """
    id: int

    # Human-facing, e.g. "INV-1-20261019-0004" (not unique, see sale_service)
    invoice_number: Annotated[str, Indexed()]

    # Location & Staff
    branch_id: Annotated[int, Indexed()]
    user_id: int                    # Cashier
    customer_id: Optional[int] = None

    # Financial Details
    subtotal: float
    gst_amount: float = 0.0
    discount: float = 0.0           # Resolved amount, not the percentage
    discount_type: DiscountType = DiscountType.AMOUNT
    grand_total: float              # subtotal + gst_amount - discount
    loyalty_points: int = 0         # Credited to the customer; reversed exactly on cancel

    # Payment
    payment_method: PaymentMethod = PaymentMethod.CASH
    payment_status: PaymentStatus = PaymentStatus.PAID

    status: SaleStatus = SaleStatus.COMPLETED
    notes: str = ""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "sales"


class SaleItem(Document):
    """One cart line of a sale."""
    id: int
    sale_id: Annotated[int, Indexed()]
    product_id: int

    quantity: int
    unit_price: float               # Price at time of sale (snapshot)
    discount: float = 0.0
    gst_rate: float = 0.0
    gst_amount: float = 0.0
    total: float                    # quantity × unit_price

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "sale_items"


class HeldSale(Document):
    """A parked POS cart that can be resumed later."""
    id: int
    branch_id: Optional[int] = None
    user_id: int
    customer_id: Optional[int] = None
    cart_data: List[Dict[str, Any]] = []
    notes: str = ""

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "held_sales"
