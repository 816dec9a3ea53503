# Campus Grievance Desk: Seed Data Importer
# Resets the MongoDB collections and loads demo users and grievances
#
# Usage:  python importer.py

import asyncio
import sys
from pathlib import Path

from pymongo import MongoClient

# Ensure the seed package is importable when running from another directory
_root_dir = Path(__file__).resolve().parent
if str(_root_dir) not in sys.path:
    sys.path.insert(0, str(_root_dir))

from seed.config import MONGODB_URL, MONGODB_DB
from seed.users import import_users, USERS
from seed.grievances import import_grievances, GRIEVANCES


async def seed_database(db) -> dict:
    """Drop and re-seed the users and grievances collections of *db*."""
    for coll_name in ["grievances", "users"]:
        db[coll_name].drop()
    user_ids = await import_users(db)
    inserted = await import_grievances(db, user_ids)
    return {"users": len(user_ids), "grievances": len(inserted)}


async def main():
    print("=" * 64)
    print("  Campus Grievance Desk: Data Importer")
    print("=" * 64)

    print("\n[1/2] Connecting to MongoDB...")
    mongo_client = MongoClient(MONGODB_URL, tz_aware=True)
    db = mongo_client[MONGODB_DB]
    print(f"  Connected: {MONGODB_URL} ({MONGODB_DB})")

    print("\n[2/2] Resetting and seeding collections...")
    counts = await seed_database(db)
    mongo_client.close()

    print("\n" + "=" * 64)
    print("  IMPORT COMPLETE")
    print("=" * 64)
    print(f"  Users:       {counts['users']} of {len(USERS)}")
    print(f"  Grievances:  {counts['grievances']} of {len(GRIEVANCES)}")
    print()
    print("  Test credentials:")
    print("    Student : aarav.mehta@students.campus.edu / student123")
    print("    Faculty : ananya.rao@campus.edu / faculty123")
    print("    Admin   : admin@campus.edu / admin123")
    print("=" * 64)


if __name__ == "__main__":
    asyncio.run(main())
