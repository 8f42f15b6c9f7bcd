import asyncio
import logging
from petcare.core.database import init_db
from petcare.core.counters import next_id
from petcare.models.branch import Branch
from petcare.models.user import User, UserRole
from petcare.core.security import get_password_hash
from petcare.core.config import settings

logger = logging.getLogger("seed")

HEAD_OFFICE_CODE = "HQ-01"


async def seed_data():
    logger.info("Connecting to database %s", settings.DATABASE_NAME)
    await init_db()

    # 1. Head office branch
    branch = await Branch.find_one(Branch.code == HEAD_OFFICE_CODE)
    if branch:
        logger.info("Branch %s already exists (id %s)", HEAD_OFFICE_CODE, branch.id)
    else:
        branch = Branch(id=await next_id(Branch.Settings.name), name="Head Office", code=HEAD_OFFICE_CODE)
        await branch.insert()
        logger.info("Created branch %s (id %s)", HEAD_OFFICE_CODE, branch.id)

    # 2. Admin from settings
    admin_pass = settings.ADMIN_PASSWORD or "admin123"
    if await User.find_one(User.username == settings.ADMIN_USERNAME):
        logger.info("Admin '%s' already exists", settings.ADMIN_USERNAME)
        return

    admin_user = User(
        id=await next_id(User.Settings.name),
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        full_name="System Admin",
        password_hash=get_password_hash(admin_pass),
        role=UserRole.ADMIN,
        is_active=True,
    )
    await admin_user.insert()

    print("\nAdmin user created.")
    print("------------------------------------------")
    print(f"Username: {admin_user.username}")
    print(f"Password: {admin_pass}")
    print("------------------------------------------")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(seed_data())
