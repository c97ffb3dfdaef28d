import re

from passlib.context import CryptContext

from .errors import AuthError

# Central password hashing/verification context.
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """Converts a plaintext password into a salted pbkdf2 hash."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifies a plaintext password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def validate_credentials(email: str, password: str) -> None:
    """Raise AuthError for the credential problems an identity provider would reject."""
    if not EMAIL_RE.match(normalize_email(email)):
        raise AuthError("invalid-email", email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise AuthError("weak-password")
