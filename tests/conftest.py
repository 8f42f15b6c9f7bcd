import os

# Token secrets must exist before settings are imported
os.environ.setdefault("SECRET_KEY", "test-staff-secret")
os.environ.setdefault("CUSTOMER_SECRET_KEY", "test-customer-secret")

import pytest
from httpx import ASGITransport, AsyncClient

from petcare.main import app
from petcare.core.counters import next_id
from petcare.core.database import init_db
from petcare.core.security import get_password_hash, create_access_token, create_customer_token
from petcare.models.branch import Branch
from petcare.models.category import Category
from petcare.models.customer import Customer
from petcare.models.product import Product
from petcare.models.stock import Stock
from petcare.models.supplier import Supplier
from petcare.models.user import User, UserRole

PASSWORD = "secret123"


@pytest.fixture
async def db():
    """Fresh in-memory database with Beanie bound to it."""
    mongomock_motor = pytest.importorskip("mongomock_motor")
    client = mongomock_motor.AsyncMongoMockClient()
    database = client["petcare_test"]
    await init_db(database)
    yield database


@pytest.fixture
async def client(db):
    """HTTP client driving the app in-process (lifespan is not run)."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def branch(db):
    branch = Branch(id=await next_id("branches"), name="Anna Nagar", code="CHN-01")
    await branch.insert()
    return branch


@pytest.fixture
async def other_branch(db):
    branch = Branch(id=await next_id("branches"), name="Velachery", code="CHN-02")
    await branch.insert()
    return branch


async def make_user(username, role, branch_id=None, is_active=True):
    user = User(
        id=await next_id("users"),
        username=username,
        email=f"{username}@petcare.test",
        full_name=username.title(),
        password_hash=get_password_hash(PASSWORD),
        role=role,
        branch_id=branch_id,
        is_active=is_active,
    )
    await user.insert()
    return user


@pytest.fixture
async def admin(db):
    """Head-office admin (no branch)."""
    return await make_user("admin", UserRole.ADMIN)


@pytest.fixture
async def manager(branch):
    return await make_user("manager", UserRole.MANAGER, branch.id)


@pytest.fixture
async def cashier(branch):
    return await make_user("cashier", UserRole.CASHIER, branch.id)


@pytest.fixture
async def category(db):
    category = Category(id=await next_id("categories"), name="Dog Food", slug="dog-food")
    await category.insert()
    return category


@pytest.fixture
async def product(category):
    product = Product(
        id=await next_id("products"),
        sku="DF-001",
        barcode="8901234567890",
        name="Puppy Kibble 1kg",
        category_id=category.id,
        mrp=120.0,
        selling_price=100.0,
        gst_rate=5.0,
        min_stock=5,
    )
    await product.insert()
    return product


@pytest.fixture
async def stock(product, branch):
    """Ten units of `product` at `branch`."""
    row = Stock(
        id=await next_id("stock"),
        product_id=product.id,
        branch_id=branch.id,
        quantity=10,
        batch_number="B-001",
    )
    await row.insert()
    return row


@pytest.fixture
async def customer(db):
    customer = Customer(id=await next_id("customers"), name="Priya", phone="9876543210")
    await customer.insert()
    return customer


@pytest.fixture
async def supplier(db):
    supplier = Supplier(id=await next_id("suppliers"), name="Paws Wholesale", phone="044-2222333")
    await supplier.insert()
    return supplier


def staff_headers(user: User) -> dict:
    token = create_access_token(
        data={"sub": str(user.id), "role": user.role.value, "branch_id": user.branch_id}
    )
    return {"Authorization": f"Bearer {token}"}


def customer_headers(customer: Customer) -> dict:
    return {"Authorization": f"Bearer {create_customer_token(customer.id, customer.phone)}"}


def cart_line(product: Product, quantity: int, gst_amount: float = 0.0) -> dict:
    return {
        "product_id": product.id,
        "quantity": quantity,
        "unit_price": product.selling_price,
        "gst_rate": product.gst_rate,
        "gst_amount": gst_amount,
    }
