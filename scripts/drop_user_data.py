"""Drop all goals and completions for a specific user."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient


async def drop_user_data(mongodb_url: str, db_name: str, user_id: str):
    """Delete every goal and completion owned by the user."""
    client = AsyncIOMotorClient(mongodb_url)
    db = client[db_name]

    for collection_name in ("goals", "completions"):
        result = await db[collection_name].delete_many({"user_id": user_id})
        print(f"Deleted {result.deleted_count} documents from {collection_name}")

    client.close()
    print("Done!")


if __name__ == "__main__":
    if len(sys.argv) != 4:
        print("Usage: python drop_user_data.py <mongodb_url> <db_name> <user_id>")
        sys.exit(1)

    asyncio.run(drop_user_data(sys.argv[1], sys.argv[2], sys.argv[3]))
