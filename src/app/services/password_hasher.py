"""Password hashing compatible with the host service's user table.

The host stores sha256(sha256(password + STATIC_SALT) + "-" + salt) as hex,
so users created on approval can log in to it directly.
"""

import hashlib
import hmac
import secrets
import string

STATIC_SALT = "https://github.com/alist-org/alist"
SALT_ALPHABET = string.ascii_letters + string.digits
SALT_LENGTH = 8


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def static_hash(password: str) -> str:
    return _sha256_hex(password + STATIC_SALT)


def two_hash_password(password: str, salt: str) -> str:
    return _sha256_hex(f"{static_hash(password)}-{salt}")


def generate_salt() -> str:
    return "".join(secrets.choice(SALT_ALPHABET) for _ in range(SALT_LENGTH))


def verify_password(password: str, salt: str, pwd_hash: str) -> bool:
    return hmac.compare_digest(two_hash_password(password, salt), pwd_hash)
