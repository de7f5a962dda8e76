"""
Security utilities for the FormAI API.

Dashboard users authenticate with JWT access/refresh pairs. Widgets on
third-party sites authenticate with the per-forum embed API key, and custom
domains are proven with a DNS verification token.
"""
from datetime import datetime, timedelta
from typing import Optional, Literal, NamedTuple
import uuid
import secrets

import jwt
import bcrypt

from formai.config import settings

TokenType = Literal["access", "refresh"]

API_KEY_PREFIX = "fai_"
VERIFICATION_PREFIX = "formai-verify-"


# Passwords

def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# Session tokens

class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str
    refresh_jti: str


def session_claims(email: str, user_id, org_id=None) -> dict:
    """Claims carried by both tokens; org_id scopes dashboard requests."""
    return {
        "sub": email,
        "user_id": str(user_id),
        "org_id": str(org_id) if org_id else None,
    }


def _lifetime(token_type: TokenType) -> timedelta:
    if token_type == "refresh":
        return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def create_token(claims: dict, token_type: TokenType = "access", expires_delta: Optional[timedelta] = None) -> str:
    """
    Encode a signed JWT.

    Every token gets a unique `jti` so refresh tokens can be revoked
    individually.
    """
    now = datetime.utcnow()
    payload = {
        **claims,
        "type": token_type,
        "iat": now,
        "exp": now + (expires_delta or _lifetime(token_type)),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(claims, "access", expires_delta)


def issue_token_pair(claims: dict) -> TokenPair:
    """Access and refresh token for a login, plus the refresh token's jti."""
    refresh_token = create_token(claims, "refresh")
    return TokenPair(
        access_token=create_access_token(claims),
        refresh_token=refresh_token,
        refresh_jti=decode_token(refresh_token)["jti"],
    )


def decode_token(token: str) -> Optional[dict]:
    """Payload of a valid token, or None when expired or tampered with."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str, token_type: TokenType = "access") -> Optional[dict]:
    payload = decode_token(token)
    if payload and payload.get("type") == token_type:
        return payload
    return None


# Embed API keys and domain verification

def generate_api_key() -> str:
    """Key that widgets send in the X-API-Key header."""
    return f"{API_KEY_PREFIX}{secrets.token_hex(24)}"


def generate_verification_token() -> str:
    """Value of the DNS TXT record that proves ownership of a custom domain."""
    return f"{VERIFICATION_PREFIX}{secrets.token_urlsafe(24)}"


def api_keys_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison; a missing value never matches."""
    if not provided or not expected:
        return False
    return secrets.compare_digest(provided, expected)
