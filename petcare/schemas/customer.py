from pydantic import BaseModel, Field
from typing import Optional
from petcare.models.customer import CustomerType

# --- 1. STAFF-SIDE CUSTOMER RECORDS ---
class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: str = ""
    address: str = ""
    customer_type: CustomerType = CustomerType.RETAIL

class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    customer_type: Optional[CustomerType] = None
    is_active: Optional[bool] = None

# --- 2. STOREFRONT ACCOUNT ---
class CustomerRegister(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: str = ""
    password: str = Field(..., min_length=6)
    address: str = ""

class CustomerLogin(BaseModel):
    phone: str
    password: str

class CustomerProfileUpdate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = ""
    address: str = ""

# --- 3. DECODED TOKEN ---
class CustomerClaims(BaseModel):
    customer_id: int
    phone: Optional[str] = None
