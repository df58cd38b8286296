"""
Database initialization script

Run once (or after changing indexes) to create the users indexes:
    python scripts/init_db.py
    python scripts/init_db.py --drop     # rebuild from scratch
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.db.mongo import connect_to_mongo, close_mongo_connection, get_users_collection
from app.db.indexes import create_indexes, drop_all_indexes

setup_logging()
logger = get_logger("scripts.init_db")


async def main(drop: bool):
    logger.info("=" * 60)
    logger.info("  UserHub Database Setup")
    logger.info("=" * 60)
    logger.info(f"Connecting to MongoDB: {settings.MONGODB_DB_NAME}")

    await connect_to_mongo()

    try:
        if drop:
            await drop_all_indexes()

        await create_indexes()

        users = get_users_collection()
        indexes = await users.index_information()
        for idx_name in indexes.keys():
            if idx_name != "_id_":
                logger.info(f"  index: {idx_name}")

        logger.info(f"Current users: {await users.count_documents({})}")
        logger.info("Database initialization complete")

    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create UserHub MongoDB indexes")
    parser.add_argument("--drop", action="store_true", help="drop existing indexes first")
    args = parser.parse_args()
    asyncio.run(main(args.drop))
