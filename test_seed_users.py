import unittest
from unittest.mock import patch

from pymongo.errors import ServerSelectionTimeoutError

from auth_utils import hash_password, verify_password
from db import seed_users as seed


class FakeCollection:
    """Just enough of a pymongo collection for the seeder."""

    def __init__(self):
        self.documents = []
        self.indexes = []

    def create_index(self, keys, unique=False):
        self.indexes.append((keys, unique))

    def find_one(self, query):
        for doc in self.documents:
            if all(doc.get(k) == v for k, v in query.items()):
                return doc
        return None

    def insert_one(self, document):
        self.documents.append(dict(document))


def fast_hash(plain_password, rounds=None):
    return hash_password(plain_password, rounds=4)


class TestSeedUsers(unittest.TestCase):

    def setUp(self):
        self.users = FakeCollection()
        self.db = {seed.USERS_COLLECTION: self.users}

    def test_creates_four_demo_users(self):
        created = seed.seed_users(self.db)
        self.assertEqual(len(created), 4)
        self.assertEqual(len(self.users.documents), 4)

        user_b = self.users.find_one({"email": "user@tenant-b.com"})
        self.assertEqual(user_b["role"], "User")
        self.assertEqual(user_b["customerId"], "tenant-b")
        self.assertIsNone(user_b["lastLogin"])
        self.assertIsNotNone(user_b["createdAt"])

    def test_passwords_are_hashed_with_work_factor_10(self):
        seed.seed_users(self.db, users=seed.DEMO_USERS[:1])
        stored = self.users.documents[0]["password"]
        self.assertNotEqual(stored, "password")
        self.assertTrue(stored.startswith("$2b$10$"))
        self.assertTrue(verify_password("password", stored))

    @patch("db.seed_users.hash_password", new=fast_hash)
    def test_second_run_is_idempotent(self):
        seed.seed_users(self.db)
        with self.assertLogs("flowbit.seed_users", level="INFO") as logs:
            created = seed.seed_users(self.db)
        self.assertEqual(created, [])
        self.assertEqual(len(self.users.documents), 4)
        self.assertEqual(sum("already exists" in line for line in logs.output), 4)

    @patch("db.seed_users.hash_password", new=fast_hash)
    def test_role_defaults_to_user(self):
        seed.seed_users(self.db, users=[{"email": "x@tenant-c.com", "password": "pw", "customerId": "tenant-c"}])
        self.assertEqual(self.users.documents[0]["role"], "User")

    def test_schema_adds_unique_email_index(self):
        seed.ensure_user_schema(self.db)
        self.assertEqual(self.users.indexes, [([("email", 1)], True)])


class TestSeedMain(unittest.TestCase):

    @patch("db.seed_users.hash_password", new=fast_hash)
    @patch("db.seed_users.MongoClient")
    def test_main_seeds_and_closes_client(self, mock_client_cls):
        users = FakeCollection()
        client = mock_client_cls.return_value.__enter__.return_value
        client.get_default_database.return_value = {seed.USERS_COLLECTION: users}

        self.assertEqual(seed.main(), 0)
        client.admin.command.assert_called_once_with("ping")
        self.assertEqual(len(users.documents), 4)
        self.assertTrue(mock_client_cls.return_value.__exit__.called)

    @patch("db.seed_users.MongoClient")
    def test_main_fails_when_server_unreachable(self, mock_client_cls):
        client = mock_client_cls.return_value.__enter__.return_value
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

        with self.assertLogs("flowbit.seed_users", level="ERROR"):
            self.assertEqual(seed.main(), 1)
        client.get_default_database.assert_not_called()
        self.assertTrue(mock_client_cls.return_value.__exit__.called)


if __name__ == '__main__':
    unittest.main()
