from pydantic import BaseModel
from typing import Optional

# Shared properties
class BranchBase(BaseModel):
    name: str
    code: str              # e.g., "CHN-01"
    address: str = ""
    phone: str = ""
    opening_hours: Optional[str] = None

# Input data when creating a branch
class BranchCreate(BranchBase):
    pass

class BranchUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    opening_hours: Optional[str] = None
    status: Optional[str] = None
    manager_id: Optional[int] = None
