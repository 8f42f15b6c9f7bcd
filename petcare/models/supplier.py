from beanie import Document
from pydantic import Field
from typing import Optional
from datetime import datetime

class Supplier(Document):
    id: int

    # Company Details
    name: str
    contact_person: str = ""

    # Contact Info
    phone: str
    email: str = ""
    address: str = ""

    # Terms
    gst_number: str = ""
    payment_terms: str = "Net 30"
    credit_limit: float = 0.0
    outstanding_amount: float = 0.0

    # Status
    is_active: bool = True # Set to False if you stop trading with them

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "suppliers"
