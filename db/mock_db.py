import datetime
import uuid
import pytz
from settings import load_settings
from log_utils import get_logger
from .errors import MockDatabaseWriteError
from .storage import JsonFileStorage

logger = get_logger("mock_db")

# bcrypt digest of the literal password 'password'
SEEDED_PASSWORD_HASH = "$2b$10$92IXUNpkjO0rOQ5byMi.Ye4oKoEa3Ro9llC/.og/at2.uheWG/igi"

# Fields assigned at creation that an update may not overwrite
PROTECTED_FIELDS = ("_id", "createdAt")


def utc_now():
    return datetime.datetime.now(pytz.utc).isoformat()


def parse_timestamp(value):
    """Parses a stored ISO-8601 timestamp; unknown values sort as oldest."""
    if not value:
        return datetime.datetime.min.replace(tzinfo=pytz.utc)
    try:
        parsed = datetime.datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return datetime.datetime.min.replace(tzinfo=pytz.utc)
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def new_id():
    return uuid.uuid4().hex


def empty_document():
    return {"users": [], "tickets": []}


def initial_document():
    now = utc_now()
    return {
        "users": [
            {
                "_id": "1",
                "email": "admin@tenant-a.com",
                "password": SEEDED_PASSWORD_HASH,
                "customerId": "tenant-a",
                "role": "Admin",
                "createdAt": now,
                "lastLogin": None,
            },
            {
                "_id": "2",
                "email": "admin@tenant-b.com",
                "password": SEEDED_PASSWORD_HASH,
                "customerId": "tenant-b",
                "role": "Admin",
                "createdAt": now,
                "lastLogin": None,
            },
        ],
        "tickets": [],
    }


def _merge(record, updates):
    merged = dict(record)
    for key, value in (updates or {}).items():
        if key in PROTECTED_FIELDS:
            continue
        merged[key] = value
    return merged


def _index_of(records, record_id):
    for index, record in enumerate(records):
        if record.get("_id") == record_id:
            return index
    return -1


class MockDatabase:
    """
    File-backed stand-in for the real user/ticket store, for local development.

    Every call loads the whole document from storage and every mutation
    rewrites it. There is no locking: two processes writing at once can
    silently lose one of the changes.

    Reads are fail-soft (a broken file reads as an empty database) and writes
    are fail-silent unless `strict_writes` is enabled.
    """

    def __init__(self, storage=None, strict_writes=None):
        settings = load_settings()
        self.storage = storage if storage is not None else JsonFileStorage(settings.mock_db_path)
        self.strict_writes = settings.mock_db_strict_writes if strict_writes is None else strict_writes
        self.initialize_data()

    def initialize_data(self):
        if self.storage.exists():
            return
        logger.info("Creating mock database with seeded admin users.")
        self.write_data(initial_document())

    def read_data(self):
        try:
            data = self.storage.get()
        except (OSError, ValueError) as e:
            logger.error(f"Error reading mock database: {e}")
            return empty_document()

        if not isinstance(data, dict):
            logger.error("Error reading mock database: top-level value is not an object")
            return empty_document()

        for collection in ("users", "tickets"):
            records = data.get(collection, [])
            if not isinstance(records, list):
                logger.error(f"Error reading mock database: '{collection}' is not a list")
                records = []
            valid = [r for r in records if isinstance(r, dict)]
            if len(valid) != len(records):
                logger.error(f"Error reading mock database: dropped {len(records) - len(valid)} malformed {collection} entries")
            data[collection] = valid
        return data

    def write_data(self, data):
        try:
            self.storage.put(data)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing mock database: {e}")
            if self.strict_writes:
                raise MockDatabaseWriteError(str(e)) from e

    # --- User methods ---

    def find_user(self, email=None, user_id=None):
        """Finds a user by email or, when no email is given, by id."""
        if email:
            key, value = "email", email
        elif user_id:
            key, value = "_id", user_id
        else:
            return None

        for user in self.read_data()["users"]:
            if user.get(key) == value:
                return user
        return None

    def create_user(self, user_data):
        data = self.read_data()
        new_user = {
            **(user_data or {}),
            "_id": new_id(),
            "createdAt": utc_now(),
            "lastLogin": None,
        }
        data["users"].append(new_user)
        self.write_data(data)
        logger.debug(f"Created mock user {new_user['_id']}")
        return new_user

    def update_user(self, user_id, updates):
        data = self.read_data()
        index = _index_of(data["users"], user_id)
        if index == -1:
            return None

        data["users"][index] = _merge(data["users"][index], updates)
        self.write_data(data)
        return data["users"][index]

    # --- Ticket methods ---

    def find_tickets(self, customer_id=None, status=None):
        """
        Returns tickets, most recently created first.
        - customer_id: only tickets for that tenant.
        - status: only tickets with that exact status.
        """
        tickets = self.read_data()["tickets"]
        if customer_id:
            tickets = [t for t in tickets if t.get("customerId") == customer_id]
        if status:
            tickets = [t for t in tickets if t.get("status") == status]
        return sorted(tickets, key=lambda t: parse_timestamp(t.get("createdAt")), reverse=True)

    def create_ticket(self, ticket_data):
        data = self.read_data()
        new_ticket = {
            **(ticket_data or {}),
            "_id": new_id(),
            "status": "Open",
            "createdAt": utc_now(),
            "updatedAt": None,
        }
        data["tickets"].append(new_ticket)
        self.write_data(data)
        logger.debug(f"Created mock ticket {new_ticket['_id']} for {new_ticket.get('customerId')}")
        return new_ticket

    def update_ticket(self, ticket_id, updates):
        data = self.read_data()
        index = _index_of(data["tickets"], ticket_id)
        if index == -1:
            return None

        merged = _merge(data["tickets"][index], updates)
        merged["updatedAt"] = utc_now()
        data["tickets"][index] = merged
        self.write_data(data)
        return merged

    def find_ticket_by_id(self, ticket_id):
        for ticket in self.read_data()["tickets"]:
            if ticket.get("_id") == ticket_id:
                return ticket
        return None
