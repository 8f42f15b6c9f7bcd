from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from petcare.models.user import UserRole

# --- 1. LOGIN ---
class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

# --- 2. STAFF MANAGEMENT (Admin) ---
class UserBase(BaseModel):
    username: str = Field(..., min_length=3)
    email: Optional[EmailStr] = None
    full_name: str
    role: UserRole = UserRole.CASHIER
    branch_id: Optional[int] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    branch_id: Optional[int] = None
