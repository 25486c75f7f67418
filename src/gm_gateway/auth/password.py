"""bcrypt password hashing.

bcrypt only looks at the first 72 bytes of its input (and bcrypt>=4.1
refuses longer input outright), so over-long passwords are rejected with a
ValidationError rather than silently truncated.
"""

import bcrypt

from config.settings import settings
from src.gm_common.errors import ValidationError

MAX_PASSWORD_BYTES = 72


def _encode(plain: str) -> bytes:
    raw = plain.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return raw


def hash_password(plain: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    raw = plain.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(raw, hashed.encode("utf-8"))
