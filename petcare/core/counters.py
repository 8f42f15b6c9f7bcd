import logging

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from petcare.core.config import settings
from petcare.core.exceptions import AllocatorError
from petcare.models.counter import Counter

logger = logging.getLogger(__name__)


async def next_id(collection_name: str) -> int:
    """
    Issue the next sequential integer ID for a collection.

    The counter document is incremented with a single atomic
    find-and-modify, so concurrent callers for the same name always get
    distinct values and callers for different names never touch the same
    document. A missing counter starts at 0 and is created by the upsert.

    Callers must allocate before creating anything: an AllocatorError
    means no ID was issued and no document may be written for it.
    """
    collection = Counter.get_motor_collection()

    for attempt in range(1, settings.ALLOCATOR_MAX_RETRIES + 1):
        try:
            counter = await collection.find_one_and_update(
                {"_id": collection_name},
                {"$inc": {"seq": 1}},
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            return counter["seq"]
        except DuplicateKeyError:
            # Two first-time upserts raced on the same _id; the loser retries
            logger.warning("Counter upsert conflict for %s (attempt %d)", collection_name, attempt)
        except PyMongoError as e:
            logger.error("Counter allocation failed for %s: %s", collection_name, e)
            raise AllocatorError(collection_name) from e

    raise AllocatorError(collection_name)


async def current_count(collection_name: str) -> int:
    """Last ID issued for a collection (0 if none yet)."""
    counter = await Counter.get(collection_name)
    return counter.seq if counter else 0
