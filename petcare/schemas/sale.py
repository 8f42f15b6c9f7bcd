from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from petcare.models.sale import PaymentMethod, DiscountType


# ==========================================
# REQUEST SCHEMAS (What the POS sends)
# ==========================================

class CartLine(BaseModel):
    """One cart line. GST is the figure the POS computed for the line."""
    # Display fields (name, sku...) ride along into online order blobs
    model_config = ConfigDict(extra="allow")

    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    gst_rate: float = 0.0
    gst_amount: float = 0.0
    discount: float = 0.0


class SaleCreate(BaseModel):
    """Checkout request. An empty cart is rejected by the workflow."""
    items: List[CartLine] = []
    customer_id: Optional[int] = None
    branch_id: Optional[int] = None
    discount: float = 0.0
    discount_type: DiscountType = DiscountType.AMOUNT
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str = ""


class SaleCancelRequest(BaseModel):
    reason: Optional[str] = None


class HeldSaleCreate(BaseModel):
    branch_id: Optional[int] = None
    customer_id: Optional[int] = None
    cart_data: List[Dict[str, Any]] = Field(..., min_length=1)
    notes: str = ""
