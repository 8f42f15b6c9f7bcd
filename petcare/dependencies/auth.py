from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from petcare.core.config import settings
from petcare.core.exceptions import AuthenticationError, PermissionDeniedError
from petcare.core.security import decode_token
from petcare.models.user import User, UserRole
from petcare.schemas.customer import CustomerClaims

# 1. SETUP OAUTH2 (two token namespaces)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)
customer_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/customer/login", auto_error=False)

# 2. GET CURRENT USER (Base Dependency)
async def get_current_user(token: str | None = Depends(oauth2_scheme)) -> User:
    """
    Staff gate. Every failure (no header, bad token, deleted or inactive
    user) is the same "no identity" outcome.
    """
    if not token:
        raise AuthenticationError()

    try:
        payload = decode_token(token, settings.SECRET_KEY)
        user_id = int(payload.get("sub"))
        if payload.get("type") != "access":
            raise AuthenticationError()
    except (JWTError, TypeError, ValueError):
        raise AuthenticationError()

    # Fresh lookup so deactivation applies to tokens already issued
    user = await User.get(user_id)
    if user is None or user.is_active is not True:
        raise AuthenticationError()

    return user

# 3. ROLE GATES
def require_roles(*roles: UserRole):
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise PermissionDeniedError()
        return current_user
    return role_checker

get_admin_user = require_roles(UserRole.ADMIN)

# Catalogue, stock and supplier management
get_manager_user = require_roles(UserRole.ADMIN, UserRole.MANAGER)

# 4. GET CURRENT CUSTOMER (Storefront)
async def get_current_customer(token: str | None = Depends(customer_oauth2_scheme)) -> CustomerClaims:
    """
    Customer gate. Claims are trusted as decoded; the customer document
    is not re-read, so a token stays usable until it expires.
    """
    if not token:
        raise AuthenticationError()

    try:
        payload = decode_token(token, settings.CUSTOMER_SECRET_KEY)
        if payload.get("type") != "customer":
            raise AuthenticationError()
        return CustomerClaims(customer_id=int(payload.get("sub")), phone=payload.get("phone"))
    except (JWTError, TypeError, ValueError):
        raise AuthenticationError()
