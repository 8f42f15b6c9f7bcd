from beanie import Document, Indexed
from pydantic import Field
from typing import Annotated, Optional
from datetime import datetime

class Product(Document):
    id: int

    # --- Identification ---
    sku: Annotated[str, Indexed(unique=True)]   # Internal Stock Code
    barcode: Optional[str] = None               # Scanning Barcode
    name: str
    description: str = ""

    # --- Category Link ---
    category_id: int

    # --- Financials ---
    mrp: float                  # Printed maximum retail price
    selling_price: float
    purchase_price: float = 0.0
    gst_rate: float = 0.0       # Percent

    min_stock: int = 10         # Low-stock alert level (per branch)
    unit: str = "piece"
    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "products"
