import asyncio
import logging
from petcare.core.config import settings
from petcare.core.database import init_db, DOCUMENT_MODELS

logger = logging.getLogger("reset_db")


async def reset_database():
    await init_db()

    # Counters go too, so IDs restart at 1
    for model in DOCUMENT_MODELS:
        result = await model.delete_all()
        logger.info("Emptied '%s' (%s documents)", model.Settings.name, result.deleted_count if result else 0)

    print("Database is clean! You can now run 'python seed.py'.")


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    asyncio.run(reset_database())
