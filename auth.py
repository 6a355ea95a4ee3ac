import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Header
from pydantic import BaseModel
from pymongo.database import Database

from config import settings
from errors import Forbidden, InvalidCredentials, Unauthorized
from schemas import Role

logger = logging.getLogger(__name__)

# Tokens are HS256 JWTs valid until `exp`; no refresh, no revocation.
# bcrypt only looks at the first 72 bytes.
_MAX_PASSWORD_BYTES = 72


class Principal(BaseModel):
    id: str
    name: str
    role: Role


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


# Checked against when the email is unknown so both failure paths cost a hash.
_DUMMY_HASH = hash_password("dummy-password-for-timing")


def authenticate(db: Database, email: str, password: str) -> dict:
    user = db["user"].find_one({"email": email})
    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.info("Failed login attempt")
        raise InvalidCredentials()
    if not verify_password(password, user.get("password_hash", "")):
        logger.info("Failed login attempt")
        raise InvalidCredentials()
    return user


def create_access_token(user_id: str, name: str, role: Role, now: Optional[datetime] = None) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "name": name,
        "role": Role(role).value,
        "iat": issued,
        "exp": issued + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return Principal(id=payload["sub"], name=payload.get("name", ""), role=payload["role"])
    except jwt.ExpiredSignatureError:
        raise Forbidden("Token expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise Forbidden("Invalid token")


def bearer_token(authorization: Optional[str] = Header(default=None, alias="Authorization")) -> Optional[str]:
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
        return token or None
    return None


def current_principal(token: Optional[str] = Depends(bearer_token)) -> Principal:
    if not token:
        raise Unauthorized()
    return decode_access_token(token)


def require_admin(principal: Principal = Depends(current_principal)) -> Principal:
    if principal.role != Role.admin:
        raise Forbidden("Admin only")
    return principal
