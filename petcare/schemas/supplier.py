from pydantic import BaseModel, Field
from typing import Optional

# 1. Create Schema (What the frontend sends to add a supplier)
class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1)
    contact_person: str = ""
    phone: str = Field(..., min_length=1)
    email: str = ""
    address: str = ""
    gst_number: str = ""
    payment_terms: str = "Net 30"
    credit_limit: float = Field(default=0.0, ge=0)

# 2. Update Schema (What the frontend sends to edit)
class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    gst_number: Optional[str] = None
    payment_terms: Optional[str] = None
    credit_limit: Optional[float] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
