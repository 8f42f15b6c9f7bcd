import re
from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from petcare.models.customer import Customer, CustomerType
from petcare.models.online_order import OnlineOrder
from petcare.schemas.customer import (
    CustomerRegister, CustomerLogin, CustomerProfileUpdate, CustomerClaims
)
from petcare.core.counters import next_id
from petcare.core.security import get_password_hash, verify_password, create_customer_token
from petcare.dependencies.auth import get_current_customer
from petcare.services.order_service import parse_items

router = APIRouter()

PHONE_PATTERN = re.compile(r"^[+]?[\d\s-]{10,15}$")


def storefront_customer(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "address": customer.address,
        "loyalty_points": customer.loyalty_points,
        "total_purchases": customer.total_purchases,
        "created_at": customer.created_at,
    }


# ==========================================
# 1. REGISTER (new account or activate a till customer)
# ==========================================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(data: CustomerRegister):
    if not PHONE_PATTERN.match(re.sub(r"\s", "", data.phone)):
        raise HTTPException(status_code=400, detail="Please enter a valid phone number")

    existing = await Customer.find_one(Customer.phone == data.phone)
    if existing:
        if existing.password_hash:
            raise HTTPException(
                status_code=400,
                detail="An account with this phone number already exists. Please login."
            )

        # Customer was created at the till: set the password in place
        existing.password_hash = get_password_hash(data.password)
        existing.name = data.name
        existing.email = data.email
        existing.address = data.address
        existing.updated_at = datetime.utcnow()
        await existing.save()

        token = create_customer_token(existing.id, existing.phone)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=jsonable_encoder({
                "success": True,
                "message": "Account activated successfully",
                "data": {"token": token, "customer": storefront_customer(existing)},
            }),
        )

    customer = Customer(
        id=await next_id(Customer.Settings.name),
        name=data.name,
        phone=data.phone,
        email=data.email,
        address=data.address,
        password_hash=get_password_hash(data.password),
        customer_type=CustomerType.RETAIL,
        loyalty_points=0,
    )
    await customer.insert()

    return {
        "success": True,
        "message": "Registration successful",
        "data": {
            "token": create_customer_token(customer.id, customer.phone),
            "customer": storefront_customer(customer),
        },
    }


# ==========================================
# 2. LOGIN
# ==========================================

@router.post("/login")
async def login(data: CustomerLogin):
    customer = await Customer.find_one(Customer.phone == data.phone)
    if not customer:
        raise HTTPException(status_code=401, detail="No account found with this phone number")

    if not customer.password_hash:
        raise HTTPException(status_code=401, detail="Please register to create a password")

    if not verify_password(data.password, customer.password_hash):
        raise HTTPException(status_code=401, detail="Invalid password")

    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "token": create_customer_token(customer.id, customer.phone),
            "customer": storefront_customer(customer),
        },
    }


# ==========================================
# 3. PROFILE
# ==========================================

@router.get("/profile")
async def get_profile(claims: CustomerClaims = Depends(get_current_customer)):
    customer = await Customer.get(claims.customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"success": True, "data": storefront_customer(customer)}


@router.put("/profile")
async def update_profile(
    data: CustomerProfileUpdate,
    claims: CustomerClaims = Depends(get_current_customer)
):
    customer = await Customer.get(claims.customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    customer.name = data.name
    customer.email = data.email
    customer.address = data.address
    customer.updated_at = datetime.utcnow()
    await customer.save()

    return {"success": True, "message": "Profile updated successfully", "data": storefront_customer(customer)}


# ==========================================
# 4. ORDER HISTORY
# ==========================================

@router.get("/orders")
async def my_orders(claims: CustomerClaims = Depends(get_current_customer)):
    orders = await OnlineOrder.find(
        OnlineOrder.customer_id == claims.customer_id
    ).sort(-OnlineOrder.created_at).to_list()

    data = []
    for order in orders:
        row = order.model_dump(exclude={"items_json", "revision_id"})
        row["items"] = parse_items(order)
        data.append(row)

    return {"success": True, "data": data, "count": len(data)}
