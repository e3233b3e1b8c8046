"""Password hashing for locally registered profiles."""
from werkzeug.security import generate_password_hash, check_password_hash


def generate_hash(password: str) -> str:
    return generate_password_hash(password)


def check_hash(password: str, hashed: str | None) -> bool:
    """Constant-time compare of a password against a stored hash; False for a missing or corrupt hash."""
    if not hashed:
        return False
    try:
        return check_password_hash(hashed, password)
    except (TypeError, ValueError):
        return False
