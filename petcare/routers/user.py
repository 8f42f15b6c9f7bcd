from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from petcare.models.user import User
from petcare.models.branch import Branch
from petcare.schemas.user import UserCreate, UserUpdate
from petcare.core.counters import next_id
from petcare.core.security import get_password_hash
from petcare.dependencies.auth import get_admin_user
from petcare.routers.auth import public_user

router = APIRouter()

# ---------------------------------------------------------
# 1. CREATE STAFF USER (Admin Only)
# ---------------------------------------------------------
@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: User = Depends(get_admin_user)
):
    # A. Check if user already exists
    if await User.find_one(User.username == user_data.username):
        raise HTTPException(status_code=400, detail=f"Username '{user_data.username}' is already taken.")
    if user_data.email and await User.find_one(User.email == user_data.email):
        raise HTTPException(status_code=400, detail=f"User with email {user_data.email} already exists.")

    # B. Validate Branch (If one was assigned)
    if user_data.branch_id is not None and not await Branch.get(user_data.branch_id):
        raise HTTPException(status_code=404, detail=f"Branch ID {user_data.branch_id} not found.")

    # C. Create User
    new_user = User(
        id=await next_id(User.Settings.name),
        username=user_data.username,
        email=user_data.email,
        full_name=user_data.full_name,
        role=user_data.role,
        branch_id=user_data.branch_id,
        password_hash=get_password_hash(user_data.password),
        is_active=True,
    )
    await new_user.insert()

    return {"success": True, "message": "User created successfully", "data": public_user(new_user)}

# ---------------------------------------------------------
# 2. LIST ALL USERS (Admin Only)
# ---------------------------------------------------------
@router.get("/")
async def list_users(admin: User = Depends(get_admin_user)):
    users = await User.find_all().sort("_id").to_list()
    return {"success": True, "data": [public_user(u) for u in users], "count": len(users)}

# ---------------------------------------------------------
# 3. UPDATE USER (Admin Only)
# ---------------------------------------------------------
@router.put("/{user_id}")
async def update_user(
    user_id: int,
    update_data: UserUpdate,
    admin: User = Depends(get_admin_user)
):
    user = await User.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if update_data.branch_id is not None and not await Branch.get(update_data.branch_id):
        raise HTTPException(status_code=404, detail=f"Branch {update_data.branch_id} not found")

    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    user.updated_at = datetime.utcnow()
    await user.save()

    return {"success": True, "message": "User updated successfully", "data": public_user(user)}

# ---------------------------------------------------------
# 4. CHANGE USER STATUS (Deactivate/Reactivate)
# ---------------------------------------------------------
@router.patch("/{user_id}/status")
async def change_user_status(
    user_id: int,
    active: bool,
    admin: User = Depends(get_admin_user)
):
    """
    Usage: PATCH /users/{id}/status?active=false
    Takes effect on the user's next request, even with a live token.
    """
    user = await User.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if user.id == admin.id:
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account.")

    user.is_active = active
    user.updated_at = datetime.utcnow()
    await user.save()

    status_msg = "activated" if active else "deactivated"
    return {
        "success": True,
        "message": f"User {user.full_name} has been {status_msg} successfully.",
        "data": {"id": user.id, "is_active": user.is_active},
    }
