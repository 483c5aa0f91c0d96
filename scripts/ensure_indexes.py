"""Create the MongoDB indexes the API relies on.

The API does this on startup as well; run this before deploying against a
database that already holds duplicate completions so the failure shows up
here instead of at boot.

Usage:
    python scripts/ensure_indexes.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError

from app.config import settings
from app.database import ensure_indexes


async def main() -> int:
    client = AsyncIOMotorClient(settings.mongodb_url)
    db = client[settings.mongodb_db_name]
    try:
        await ensure_indexes(db)
    except DuplicateKeyError as e:
        print(f"Index creation failed, duplicate data present: {e}")
        return 1
    finally:
        client.close()

    print(f"Indexes ensured on {settings.mongodb_db_name}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
