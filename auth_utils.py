import bcrypt

BCRYPT_ROUNDS = 10


def hash_password(plain_password, rounds=BCRYPT_ROUNDS):
    """Hashes a password using bcrypt with the given work factor."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password, hashed_password):
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed or non-bcrypt digest
        return False
