from fastapi import APIRouter, HTTPException, Depends, status
from datetime import datetime

from petcare.models.supplier import Supplier
from petcare.models.user import User
from petcare.schemas.supplier import SupplierCreate, SupplierUpdate
from petcare.core.counters import next_id
from petcare.dependencies.auth import get_current_user, get_admin_user, get_manager_user

router = APIRouter()

# ---------------------------------------------------------
# ➕ CREATE A SUPPLIER
# ---------------------------------------------------------
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_supplier(
    supplier_data: SupplierCreate,
    manager: User = Depends(get_manager_user) # Only Managers/Admins
):
    supplier = Supplier(id=await next_id(Supplier.Settings.name), **supplier_data.model_dump())
    await supplier.insert()
    return {"success": True, "message": "Supplier created successfully", "data": supplier.model_dump(exclude={"revision_id"})}

# ---------------------------------------------------------
# 📜 GET ALL SUPPLIERS
# ---------------------------------------------------------
@router.get("/")
async def get_suppliers(current_user: User = Depends(get_current_user)):
    suppliers = await Supplier.find(Supplier.is_active == True).sort("+name").to_list()  # noqa: E712
    return {"success": True, "data": [s.model_dump(exclude={"revision_id"}) for s in suppliers], "count": len(suppliers)}

# ---------------------------------------------------------
# 🔍 GET ONE SUPPLIER
# ---------------------------------------------------------
@router.get("/{supplier_id}")
async def get_supplier(supplier_id: int, current_user: User = Depends(get_current_user)):
    supplier = await Supplier.get(supplier_id)
    if not supplier:
        raise HTTPException(404, "Supplier not found")
    return {"success": True, "data": supplier.model_dump(exclude={"revision_id"})}

# ---------------------------------------------------------
# ✏️ UPDATE SUPPLIER
# ---------------------------------------------------------
@router.put("/{supplier_id}")
async def update_supplier(
    supplier_id: int,
    update_data: SupplierUpdate,
    manager: User = Depends(get_manager_user)
):
    supplier = await Supplier.get(supplier_id)
    if not supplier:
        raise HTTPException(404, "Supplier not found")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(supplier, field, value)
    supplier.updated_at = datetime.utcnow()
    await supplier.save()

    return {"success": True, "message": "Supplier updated successfully", "data": supplier.model_dump(exclude={"revision_id"})}

# ---------------------------------------------------------
# 🗑️ DELETE SUPPLIER (soft)
# ---------------------------------------------------------
@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: int,
    admin: User = Depends(get_admin_user)
):
    supplier = await Supplier.get(supplier_id)
    if not supplier:
        raise HTTPException(404, "Supplier not found")

    supplier.is_active = False
    supplier.updated_at = datetime.utcnow()
    await supplier.save()
    return {"success": True, "message": "Supplier deleted successfully"}
