"""bcrypt hashing for the admin secret."""

import bcrypt

# Cost factor for hashes made at startup from a plain ADMIN_SECRET
BCRYPT_COST = 12


def hash_password(secret: str, rounds: int = BCRYPT_COST) -> str:
    """Hash a secret for storage in ``ADMIN_SECRET_HASH``.

    Args:
        secret: Plain text secret.
        rounds: bcrypt cost factor. Tests use a low value to stay fast.

    Returns:
        The bcrypt hash as text.
    """
    return bcrypt.hashpw(secret.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(secret: str, secret_hash: str) -> bool:
    """Check a presented secret against a stored bcrypt hash.

    A malformed hash counts as a mismatch rather than an error, so a bad
    ``ADMIN_SECRET_HASH`` disables deletion instead of breaking requests.
    """
    try:
        return bcrypt.checkpw(secret.encode("utf-8"), secret_hash.encode("utf-8"))
    except ValueError:
        return False
