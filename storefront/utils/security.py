# storefront/utils/security.py
from datetime import datetime, timezone, timedelta

import bcrypt
import jwt

from storefront.utils.settings import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRES_DAYS


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=10)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def create_access_token(user_id: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + timedelta(days=JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Rzuca jwt.InvalidTokenError gdy token zły albo wygasł."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
