from datetime import datetime
from fastapi import APIRouter, HTTPException, status, Depends
from petcare.models.user import User
from petcare.models.branch import Branch
from petcare.schemas.user import LoginRequest, ChangePasswordRequest
from petcare.core.security import get_password_hash, verify_password, create_access_token
from petcare.dependencies.auth import get_current_user

router = APIRouter()


def public_user(user: User) -> dict:
    """User document as returned to clients (never the hash)."""
    return user.model_dump(exclude={"password_hash", "revision_id"})


# ---------------------------------------------------------
# 1. LOGIN ENDPOINT (Get Token)
# ---------------------------------------------------------
@router.post("/login")
async def login(credentials: LoginRequest):
    # Username first, then email
    user = await User.find_one(User.username == credentials.username)
    if user is None:
        user = await User.find_one(User.email == credentials.username)

    # Unknown, inactive and wrong password all look the same
    if not user or not user.is_active or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    branch_name = None
    branch_code = None
    if user.branch_id:
        branch = await Branch.get(user.branch_id)
        if branch:
            branch_name = branch.name
            branch_code = branch.code

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role.value, "branch_id": user.branch_id}
    )

    user.last_login = datetime.utcnow()
    await user.save()

    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "token": access_token,
            "token_type": "bearer",
            "user": {**public_user(user), "branch_name": branch_name, "branch_code": branch_code},
        },
    }


# ---------------------------------------------------------
# 2. WHO AM I
# ---------------------------------------------------------
@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": public_user(current_user)}


# ---------------------------------------------------------
# 3. CHANGE PASSWORD
# ---------------------------------------------------------
@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user)
):
    if not verify_password(data.current_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    current_user.password_hash = get_password_hash(data.new_password)
    current_user.updated_at = datetime.utcnow()
    await current_user.save()

    return {"success": True, "message": "Password changed successfully"}
