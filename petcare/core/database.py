import logging

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from petcare.core.config import settings
from petcare.models.counter import Counter
from petcare.models.user import User
from petcare.models.branch import Branch
from petcare.models.category import Category
from petcare.models.product import Product
from petcare.models.stock import Stock, StockAdjustment
from petcare.models.customer import Customer
from petcare.models.supplier import Supplier
from petcare.models.sale import Sale, SaleItem, HeldSale
from petcare.models.online_order import OnlineOrder
from petcare.models.purchase_order import PurchaseOrder
from petcare.models.stock_transfer import StockTransfer

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [
    Counter, User, Branch, Category, Product, Stock, StockAdjustment,
    Customer, Supplier, Sale, SaleItem, HeldSale, OnlineOrder,
    PurchaseOrder, StockTransfer,
]


async def init_db(database=None):
    """Connect to MongoDB and initialize Beanie.

    `database` lets callers (tests, scripts) hand in an already-open database.
    """
    if database is None:
        client = AsyncIOMotorClient(settings.MONGODB_URL)
        database = client[settings.DATABASE_NAME]

    await init_beanie(database=database, document_models=DOCUMENT_MODELS)

    logger.info("Beanie initialized with database: %s", database.name)
    return database
