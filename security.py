"""
Password hashing, identity tokens and the auth gate dependency
"""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import urlencode

import jwt
from fastapi import Depends, Header, Request
from passlib.context import CryptContext

from errors import Unauthenticated

logger = logging.getLogger(__name__)

TOKEN_HEADER = "x-auth-token"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def gravatar_url(email: str, size: int = 200) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?" + urlencode({"s": size, "r": "pg", "d": "mm"})


@dataclass(frozen=True)
class Identity:
    """The caller resolved from a valid token"""
    id: str


class TokenService:
    """Issues and verifies signed, time-limited tokens carrying a user id"""

    def __init__(self, secret: str, expires_seconds: int = 360000, algorithm: str = "HS256"):
        self.secret = secret
        self.expires_delta = timedelta(seconds=expires_seconds)
        self.algorithm = algorithm

    def issue(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "user": {"id": user_id},
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expires_delta),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[Identity]:
        """Decode a token; any bad signature, expiry or shape gives None"""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as e:
            logger.debug(f"[AUTH] Token rejected: {e}")
            return None
        user = payload.get("user")
        if not isinstance(user, dict) or not isinstance(user.get("id"), str):
            return None
        return Identity(id=user["id"])


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_current_identity(
    x_auth_token: Optional[str] = Header(None, alias=TOKEN_HEADER),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    if not x_auth_token:
        raise Unauthenticated("No token, authorization denied")
    identity = tokens.verify(x_auth_token)
    if identity is None:
        logger.warning("[AUTH] Request with invalid token rejected")
        raise Unauthenticated("Token is not valid")
    return identity
