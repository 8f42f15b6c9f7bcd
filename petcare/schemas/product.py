from pydantic import BaseModel, Field
from typing import Optional

class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1)
    barcode: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: str = ""
    category_id: int
    mrp: float = Field(..., gt=0)
    selling_price: float = Field(..., gt=0)
    purchase_price: float = Field(default=0.0, ge=0)
    gst_rate: float = Field(default=0.0, ge=0, le=100)
    min_stock: int = Field(default=10, ge=0)
    unit: str = "piece"

class ProductUpdate(BaseModel):
    sku: Optional[str] = None
    barcode: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    mrp: Optional[float] = Field(default=None, gt=0)
    selling_price: Optional[float] = Field(default=None, gt=0)
    purchase_price: Optional[float] = Field(default=None, ge=0)
    gst_rate: Optional[float] = Field(default=None, ge=0, le=100)
    min_stock: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
    is_active: Optional[bool] = None
