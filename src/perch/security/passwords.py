"""Password hashing with argon2id.

Hashes are PHC-format strings (``$argon2id$v=19$m=...``) carrying their
own parameters, so ``needs_rehash`` can tell when a stored hash predates
the current cost settings.

Usage::

    from perch.security.passwords import hash_password, needs_rehash, verify_password

    hashed = hash_password("my-password")
    if verify_password("my-password", hashed) and needs_rehash(hashed):
        hashed = hash_password("my-password")
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """True if *password* matches *hashed*. Malformed hashes never match."""
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    """True if *hashed* was made with parameters other than the current ones."""
    try:
        return _hasher.check_needs_rehash(hashed)
    except InvalidHashError:
        return True
