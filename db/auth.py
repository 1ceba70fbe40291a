from auth_utils import verify_password
from log_utils import get_logger
from .mock_db import utc_now

logger = get_logger("auth")


def login_user(mock_db, email, password):
    """
    Authenticates a user against the mock database and records the login.

    Args:
        mock_db (MockDatabase): The store to authenticate against.
        email (str): The user's email.
        password (str): The user's plain-text password.

    Returns:
        dict: The user's record with `lastLogin` refreshed if authentication
              is successful, otherwise None.
    """
    user = mock_db.find_user(email=email)
    if not user or not verify_password(password, user.get("password")):
        logger.info(f"Failed login for {email}")
        return None

    return mock_db.update_user(user["_id"], {"lastLogin": utc_now()})
