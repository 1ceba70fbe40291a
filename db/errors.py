class MockDatabaseError(Exception):
    """Base error for the file-backed mock database."""


class MockDatabaseWriteError(MockDatabaseError):
    """Raised when persisting the mock database fails and strict writes are on."""
