"""
Credential primitives for the identity subsystem.

Passwords are stored as bcrypt hashes. A session is a signed JWT whose
subject is the user id. Signing parameters are read from the environment
(JWT_SECRET, JWT_ALG, ACCESS_TOKEN_EXPIRE_MIN) per call unless a TokenConfig
is passed in.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import bcrypt
import jwt

from core import settings

SESSION_TOKEN_TYPE = "session"

# bcrypt ignores input past this many bytes.
BCRYPT_MAX_BYTES = 72


class IdentitySecurityError(RuntimeError):
    pass


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str
    ttl_s: int

    @classmethod
    def from_env(cls) -> TokenConfig:
        return cls(
            secret=settings.env_str("JWT_SECRET", "dev-change-this-secret"),
            algorithm=settings.env_str("JWT_ALG", "HS256"),
            ttl_s=settings.env_int("ACCESS_TOKEN_EXPIRE_MIN", 60) * 60,
        )


def _password_bytes(plain_password: str | None) -> bytes:
    return (plain_password or "").encode("utf-8")


def hash_password(plain_password: str) -> str:
    password = _password_bytes(plain_password)
    if not password:
        raise IdentitySecurityError("Password is empty.")
    if len(password) > BCRYPT_MAX_BYTES:
        raise IdentitySecurityError(f"Password is longer than {BCRYPT_MAX_BYTES} bytes.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    password = _password_bytes(plain_password)
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password, password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long input.
        return False


def build_access_token(*, user_id: str, email: str, config: TokenConfig | None = None) -> str:
    config = config or TokenConfig.from_env()
    issued_at = int(time.time())
    claims = {
        "sub": str(user_id),
        "email": email,
        "type": SESSION_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + config.ttl_s,
    }
    return jwt.encode(claims, config.secret, algorithm=config.algorithm)


def decode_access_token(token: str, *, config: TokenConfig | None = None) -> dict[str, Any]:
    """
    Verify a session token and return its claims.

    Raises IdentitySecurityError for an empty, expired, tampered or foreign
    token, and for one without a subject.
    """
    raw = (token or "").strip()
    if not raw:
        raise IdentitySecurityError("Session token is empty.")

    config = config or TokenConfig.from_env()
    try:
        claims = jwt.decode(
            raw,
            config.secret,
            algorithms=[config.algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.InvalidTokenError as exc:
        raise IdentitySecurityError("Invalid session token.") from exc

    if claims.get("type") != SESSION_TOKEN_TYPE:
        raise IdentitySecurityError("Not a session token.")
    if not str(claims["sub"]).strip():
        raise IdentitySecurityError("Session token has no subject.")
    return claims
