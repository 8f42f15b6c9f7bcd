from datetime import datetime, timedelta
from typing import Optional
from jose import jwt
from passlib.context import CryptContext
from petcare.core.config import settings

# 1. Password Hashing Setup
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

# 2. STAFF TOKEN
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    # If no type is specified, default to "access" (for login)
    if "type" not in to_encode:
        to_encode["type"] = "access"

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

# 3. CUSTOMER TOKEN (separate secret, separate type)
def create_customer_token(customer_id: int, phone: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.CUSTOMER_TOKEN_EXPIRE_DAYS))
    to_encode = {
        "sub": str(customer_id),
        "phone": phone,
        "type": "customer",
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.CUSTOMER_SECRET_KEY, algorithm=settings.ALGORITHM)

# 4. VERIFY (raises jose.JWTError on bad signature / expiry / garbage)
def decode_token(token: str, secret: str) -> dict:
    return jwt.decode(token, secret, algorithms=[settings.ALGORITHM])
