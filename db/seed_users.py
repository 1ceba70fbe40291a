import datetime
import sys
import pytz
from pymongo import ASCENDING, MongoClient
from auth_utils import hash_password, BCRYPT_ROUNDS
from log_utils import get_logger
from settings import load_settings

logger = get_logger("seed_users")

USERS_COLLECTION = "users"
DEFAULT_ROLE = "User"

DEMO_USERS = [
    {"email": "admin@tenant-a.com", "password": "password", "customerId": "tenant-a", "role": "Admin"},
    {"email": "user@tenant-a.com", "password": "password", "customerId": "tenant-a", "role": "User"},
    {"email": "admin@tenant-b.com", "password": "password", "customerId": "tenant-b", "role": "Admin"},
    {"email": "user@tenant-b.com", "password": "password", "customerId": "tenant-b", "role": "User"},
]


def ensure_user_schema(db):
    """Makes sure the users collection enforces unique emails."""
    db[USERS_COLLECTION].create_index([("email", ASCENDING)], unique=True)


def seed_users(db, users=None):
    """Seeds the database with the demo users if they don't exist. Returns the created emails."""
    collection = db[USERS_COLLECTION]
    created = []

    for user_data in users or DEMO_USERS:
        if collection.find_one({"email": user_data["email"]}):
            logger.info(f"User already exists: {user_data['email']}")
            continue

        record = {
            "role": DEFAULT_ROLE,
            **user_data,
            "password": hash_password(user_data["password"], rounds=BCRYPT_ROUNDS),
            "createdAt": datetime.datetime.now(pytz.utc),
            "lastLogin": None,
        }
        collection.insert_one(record)
        created.append(user_data["email"])
        logger.info(f"Created user: {user_data['email']}")

    return created


def main():
    settings = load_settings()
    try:
        with MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=settings.mongodb_server_timeout_ms) as client:
            # Fail fast if the server is unreachable or the credentials are wrong
            client.admin.command("ping")
            db = client.get_default_database()
            ensure_user_schema(db)
            seed_users(db)
    except Exception:
        logger.exception("Error creating demo users")
        return 1

    logger.info("Demo users created successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
