"""
Password hashing (bcrypt) and identity tokens (JWT, HS256).

Usage:
    password_hash = hash_password("secret")
    check_password("secret", password_hash)

    issuer = TokenIssuer(secret_key=settings.jwt_secret)
    token = issuer.issue(faculty.id, {"email": faculty.email})
    claims = issuer.verify(token)  # raises Unauthorized
"""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .config import settings
from .errors import Unauthorized

logger = logging.getLogger(__name__)

TOKEN_LIFETIME = timedelta(days=7)
OPTIONAL_CLAIMS = ("email", "name", "department")


def _encode(plain: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return plain.encode("utf-8")[:72]


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Password cannot be empty")
    salt = bcrypt.gensalt(rounds=settings.password_salt_rounds)
    return bcrypt.hashpw(_encode(plain), salt).decode()


def check_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class TokenClaims(BaseModel):
    faculty_id: int
    email: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None
    iat: datetime
    exp: datetime


class TokenIssuer:
    """Issues and verifies signed faculty identity tokens."""

    def __init__(self, secret_key: str, lifetime: timedelta = TOKEN_LIFETIME, algorithm: str = "HS256"):
        if not secret_key:
            raise ValueError("JWT secret key must be set")
        self.secret_key = secret_key
        self.lifetime = lifetime
        self.algorithm = algorithm

    def issue(self, faculty_id: int, claims: Optional[Dict[str, str]] = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {"facultyId": faculty_id, "iat": now, "exp": now + self.lifetime}
        for key in OPTIONAL_CLAIMS:
            if claims and claims.get(key) is not None:
                payload[key] = claims[key]
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        if not token:
            raise Unauthorized("Authentication required")
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token has expired")
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid token")

        faculty_id = payload.get("facultyId")
        if not isinstance(faculty_id, int):
            raise Unauthorized("Invalid token")
        return TokenClaims(
            faculty_id=faculty_id,
            email=payload.get("email"),
            name=payload.get("name"),
            department=payload.get("department"),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


@lru_cache()
def get_token_issuer() -> TokenIssuer:
    """Dependency injection for TokenIssuer."""
    return TokenIssuer(secret_key=settings.jwt_secret)


bearer_scheme = HTTPBearer(auto_error=False)


def current_faculty_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> int:
    """FastAPI dependency yielding the authenticated faculty id."""
    if credentials is None:
        raise Unauthorized("Authentication required")
    return issuer.verify(credentials.credentials).faculty_id
