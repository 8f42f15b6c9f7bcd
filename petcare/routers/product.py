import re
from fastapi import APIRouter, HTTPException, Depends, Query, status
from typing import Optional
from datetime import datetime

from petcare.models.product import Product
from petcare.models.category import Category
from petcare.models.branch import Branch
from petcare.models.stock import Stock
from petcare.models.user import User
from petcare.schemas.product import ProductCreate, ProductUpdate
from petcare.core.config import settings
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_admin_user, get_manager_user
from petcare.services.stock_service import low_stock_rows, expiring_rows, days_until

router = APIRouter()


def batch_number_for(branch_id: int, product_id: int) -> str:
    """Opening batch label, e.g. BTH020017 for product 17 at branch 2."""
    return f"BTH{branch_id:02d}{product_id:04d}"


def with_category(product: Product, categories: dict) -> dict:
    category = categories.get(product.category_id)
    return {
        **product.model_dump(exclude={"revision_id"}),
        "category_name": category.name if category else None,
        "category_icon": category.icon if category else None,
        "category_color": category.color if category else None,
    }


async def categories_by_id() -> dict:
    return {c.id: c for c in await Category.find_all().to_list()}


# ==========================================
# 🌍 STAFF ACTIONS (Any logged-in user)
# ==========================================

@router.get("/")
async def get_products(
    category: Optional[int] = None,
    search: Optional[str] = None,
    branch_id: Optional[int] = None,
    user: User = Depends(get_current_user)
):
    query = Product.find(Product.is_active == True)  # noqa: E712

    if category:
        query = query.find(Product.category_id == category)

    if search:
        pattern = re.escape(search)
        query = query.find(
            {"$or": [
                {"name": {"$regex": pattern, "$options": "i"}},
                {"sku": {"$regex": pattern, "$options": "i"}},
                {"barcode": {"$regex": pattern}}
            ]}
        )

    products = await query.sort("+name").to_list()
    categories = await categories_by_id()

    data = []
    for product in products:
        row = with_category(product, categories)

        # Per-branch availability across all batches
        if branch_id:
            rows = await Stock.find(
                Stock.product_id == product.id,
                Stock.branch_id == branch_id,
            ).to_list()
            expiries = [r.expiry_date for r in rows if r.expiry_date]
            row["stock"] = sum(r.quantity for r in rows)
            row["nearest_expiry"] = min(expiries) if expiries else None

        data.append(row)

    return {"success": True, "data": data, "count": len(data)}


@router.get("/low-stock")
async def get_low_stock(
    branch_id: Optional[int] = None,
    user: User = Depends(get_current_user)
):
    branches = {b.id: b for b in await Branch.find_all().to_list()}
    categories = await categories_by_id()

    data = []
    for stock, product in await low_stock_rows(branch_id):
        row = with_category(product, categories)
        branch = branches.get(stock.branch_id)
        row.update({
            "stock_id": stock.id,
            "current_stock": stock.quantity,
            "branch_id": stock.branch_id,
            "branch_name": branch.name if branch else None,
            "reorder_quantity": max(0, product.min_stock - stock.quantity),
        })
        data.append(row)

    return {"success": True, "data": data, "count": len(data)}


@router.get("/expiring")
async def get_expiring(
    branch_id: Optional[int] = None,
    days: int = Query(default=settings.EXPIRY_WINDOW_DAYS, ge=0),
    user: User = Depends(get_current_user)
):
    branches = {b.id: b for b in await Branch.find_all().to_list()}
    categories = await categories_by_id()

    data = []
    for stock, product in await expiring_rows(branch_id, days):
        row = with_category(product, categories)
        branch = branches.get(stock.branch_id)
        row.update({
            "stock_id": stock.id,
            "quantity": stock.quantity,
            "batch_number": stock.batch_number,
            "expiry_date": stock.expiry_date,
            "branch_id": stock.branch_id,
            "branch_name": branch.name if branch else None,
            "days_until_expiry": days_until(stock.expiry_date),
        })
        data.append(row)

    return {"success": True, "data": data, "count": len(data)}


@router.get("/barcode/{barcode}")
async def get_product_by_barcode(barcode: str, user: User = Depends(get_current_user)):
    """Quick lookup used while scanning at checkout."""
    product = await Product.find_one(Product.barcode == barcode, Product.is_active == True)  # noqa: E712
    if not product:
        raise HTTPException(404, f"Product with barcode '{barcode}' not found")
    return {"success": True, "data": with_category(product, await categories_by_id())}


@router.get("/{product_id}")
async def get_product(product_id: int, user: User = Depends(get_current_user)):
    product = await Product.get(product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return {"success": True, "data": with_category(product, await categories_by_id())}


# ==========================================
# 🔒 MANAGER ACTIONS (Admin + Manager)
# ==========================================

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    manager: User = Depends(get_manager_user)
):
    # Check Duplicates
    if await Product.find_one(Product.sku == product_data.sku):
        raise HTTPException(400, "Product with this SKU already exists")

    # Verify Category Exists
    if not await Category.get(product_data.category_id):
        raise HTTPException(404, "The provided Category ID does not exist")

    new_product = Product(id=await next_id(Product.Settings.name), **product_data.model_dump())
    await new_product.insert()

    # Every branch starts with an empty batch row for the new product
    branches = await Branch.find_all().sort("_id").to_list()
    for branch in branches:
        await Stock(
            id=await next_id(Stock.Settings.name),
            product_id=new_product.id,
            branch_id=branch.id,
            quantity=0,
            batch_number=batch_number_for(branch.id, new_product.id),
        ).insert()

    return {"success": True, "message": "Product created successfully", "data": {"id": new_product.id}}


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    update_data: ProductUpdate,
    manager: User = Depends(get_manager_user)
):
    product = await Product.get(product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    if update_data.sku and update_data.sku != product.sku:
        if await Product.find_one(Product.sku == update_data.sku):
            raise HTTPException(400, "Product with this SKU already exists")

    # If category is changing, verify the new one
    if update_data.category_id:
        if not await Category.get(update_data.category_id):
            raise HTTPException(404, "New Category ID does not exist")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    product.updated_at = datetime.utcnow()
    await product.save()

    return {"success": True, "message": "Product updated successfully", "data": product.model_dump(exclude={"revision_id"})}


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    admin: User = Depends(get_admin_user)
):
    product = await Product.get(product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    # Soft delete: sales history still points at it
    product.is_active = False
    product.updated_at = datetime.utcnow()
    await product.save()
    return {"success": True, "message": "Product deleted successfully"}
