"""Password hashing with bcrypt."""

import bcrypt

# bcrypt ignores everything past 72 bytes
_MAX_BYTES = 72


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8")[:_MAX_BYTES], bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:_MAX_BYTES], hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
