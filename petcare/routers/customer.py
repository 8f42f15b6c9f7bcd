import re
from fastapi import APIRouter, HTTPException, Depends, status
from typing import Optional
from datetime import datetime

from petcare.models.customer import Customer
from petcare.models.sale import Sale
from petcare.models.user import User
from petcare.schemas.customer import CustomerCreate, CustomerUpdate
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_manager_user

router = APIRouter()


def staff_view(customer: Customer) -> dict:
    return customer.model_dump(exclude={"password_hash", "revision_id"})


# ---------------------------------------------------------
# 📜 LIST / SEARCH CUSTOMERS
# ---------------------------------------------------------
@router.get("/")
async def get_customers(
    search: Optional[str] = None,
    phone: Optional[str] = None,
    current_user: User = Depends(get_current_user)
):
    query = Customer.find_all()

    if phone:
        query = query.find(Customer.phone == phone)

    if search:
        pattern = re.escape(search)
        query = query.find(
            {"$or": [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"phone": {"$regex": pattern}},
                {"email": {"$regex": pattern, "$options": "i"}}
            ]}
        )

    customers = await query.sort("+name").to_list()
    return {"success": True, "data": [staff_view(c) for c in customers], "count": len(customers)}


# ---------------------------------------------------------
# ➕ CREATE A CUSTOMER (at the till)
# ---------------------------------------------------------
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    current_user: User = Depends(get_current_user)
):
    if await Customer.find_one(Customer.phone == customer_data.phone):
        raise HTTPException(400, "Customer with this phone number already exists")

    customer = Customer(id=await next_id(Customer.Settings.name), **customer_data.model_dump())
    await customer.insert()

    return {"success": True, "message": "Customer created successfully", "data": staff_view(customer)}


# ---------------------------------------------------------
# 🔍 GET ONE CUSTOMER (with purchase history)
# ---------------------------------------------------------
@router.get("/{customer_id}")
async def get_customer(customer_id: int, current_user: User = Depends(get_current_user)):
    customer = await Customer.get(customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")

    sales = await Sale.find(Sale.customer_id == customer_id).sort(-Sale.created_at).to_list()

    return {"success": True, "data": {**staff_view(customer), "sales": [s.model_dump(exclude={"revision_id"}) for s in sales]}}


# ---------------------------------------------------------
# ✏️ UPDATE CUSTOMER
# ---------------------------------------------------------
@router.put("/{customer_id}")
async def update_customer(
    customer_id: int,
    update_data: CustomerUpdate,
    current_user: User = Depends(get_current_user)
):
    customer = await Customer.get(customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(customer, field, value)
    customer.updated_at = datetime.utcnow()
    await customer.save()

    return {"success": True, "message": "Customer updated successfully", "data": staff_view(customer)}


# ---------------------------------------------------------
# 🗑️ DEACTIVATE CUSTOMER
# ---------------------------------------------------------
@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: int,
    manager: User = Depends(get_manager_user)
):
    customer = await Customer.get(customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")

    customer.is_active = False
    customer.updated_at = datetime.utcnow()
    await customer.save()

    return {"success": True, "message": "Customer deactivated successfully"}
