"""Public storefront catalogue. No token required."""
from fastapi import APIRouter, HTTPException

from petcare.models.branch import Branch
from petcare.models.category import Category
from petcare.models.online_order import OnlineOrder
from petcare.models.product import Product
from petcare.models.stock import Stock
from petcare.services.order_service import parse_items

router = APIRouter()


@router.get("/branches")
async def list_open_branches():
    branches = await Branch.find(Branch.status == "active").sort("_id").to_list()
    data = [
        {
            "id": b.id,
            "name": b.name,
            "code": b.code,
            "address": b.address,
            "phone": b.phone,
            "opening_hours": b.opening_hours,
        }
        for b in branches
    ]
    return {"success": True, "data": data}


@router.get("/categories")
async def list_categories():
    categories = await Category.find_all().sort("+name").to_list()
    return {"success": True, "data": [c.model_dump(exclude={"revision_id"}) for c in categories]}


@router.get("/products/{branch_id}")
async def list_available_products(branch_id: int):
    """Active products with something on the shelf at this branch."""
    rows = await Stock.find(Stock.branch_id == branch_id, Stock.quantity > 0).to_list()
    available = {}
    for row in rows:
        available[row.product_id] = available.get(row.product_id, 0) + row.quantity

    if not available:
        return {"success": True, "data": []}

    products = await Product.find(
        {"_id": {"$in": list(available)}},
        Product.is_active == True,  # noqa: E712
    ).sort("+name").to_list()
    categories = {c.id: c for c in await Category.find_all().to_list()}

    data = []
    for product in products:
        category = categories.get(product.category_id)
        data.append({
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "sku": product.sku,
            "mrp": product.mrp,
            "selling_price": product.selling_price,
            "gst_rate": product.gst_rate,
            "unit": product.unit,
            "category_id": product.category_id,
            "category_name": category.name if category else None,
            "category_icon": category.icon if category else None,
            "available_stock": available[product.id],
        })

    return {"success": True, "data": data}


@router.get("/order/{order_number}")
async def track_order(order_number: str):
    order = await OnlineOrder.find_one(OnlineOrder.order_number == order_number)
    if not order:
        raise HTTPException(404, "Order not found")

    branch = await Branch.get(order.branch_id)
    return {
        "success": True,
        "data": {
            **order.model_dump(exclude={"items_json", "revision_id"}),
            "items": parse_items(order),
            "branch_name": branch.name if branch else None,
        },
    }
