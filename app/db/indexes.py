"""
app/db/indexes.py

Purpose: Database index management

- Unique email index (enforces one account per address)
- Idempotent, safe to run on every startup
"""

from pymongo import ASCENDING

from app.db.mongo import get_users_collection
from app.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    This function is idempotent - safe to run multiple times.
    """
    try:
        users = get_users_collection()

        logger.info("Creating database indexes...")

        # Unique index on email (login identifier)
        await users.create_index(
            [("email", ASCENDING)], unique=True, name="email_unique"
        )
        logger.debug("Created unique index on users.email")

        user_indexes = await users.index_information()
        logger.info(f"Index summary: Users={len(user_indexes)}")

    except Exception as e:
        logger.error(f"Failed to create indexes: {str(e)}", exc_info=True)
        raise


async def drop_all_indexes():
    """
    Drops all custom indexes (keeps _id index).
    Use with caution! Only for maintenance/migration.
    """
    try:
        users = get_users_collection()

        logger.warning("Dropping all database indexes...")
        await users.drop_indexes()
        logger.info("All indexes dropped successfully")

    except Exception as e:
        logger.error(f"Failed to drop indexes: {str(e)}", exc_info=True)
        raise


if __name__ == "__main__":
    """
    Run this script directly to create indexes manually.
    """
    import asyncio
    from app.db.mongo import connect_to_mongo, close_mongo_connection

    async def main():
        await connect_to_mongo()
        await create_indexes()
        await close_mongo_connection()

    asyncio.run(main())
