"""
JWT token generation and verification utilities

Tokens are issued by the identity service; the API routes only verify them.
create_access_token is kept for tests and operator tooling that need a token
signed with the shared secret. The "sub" claim carries the identity ID and
"role" is "user" or "trainer".
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from fastapi import HTTPException, status
from app.core.config import settings

logger = logging.getLogger(__name__)

_PLACEHOLDER_SECRET = "your-secret-key-change-in-production"


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token

    Args:
        data: Claims to encode (e.g., {"sub": identity_id, "role": "trainer"})
        expires_delta: Optional timedelta for token expiration. If None, uses default from settings.

    Returns:
        Encoded JWT token string

    Raises:
        ValueError: If JWT_SECRET_KEY is not configured
    """
    if not settings.JWT_SECRET_KEY or settings.JWT_SECRET_KEY == _PLACEHOLDER_SECRET:
        error_msg = "JWT_SECRET_KEY is not properly configured. Please set it in your environment variables."
        logger.error(error_msg)
        raise ValueError(error_msg)

    to_encode = data.copy()
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "iat": now, "type": "access"})

    try:
        return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    except JWTError as e:
        logger.error(f"Error encoding access token: {e}", exc_info=True)
        raise ValueError(f"Failed to create access token: {str(e)}")


def verify_token(token: str, token_type: str = "access") -> Dict[str, Any]:
    """
    Verify and decode a JWT token

    Args:
        token: JWT token string to verify
        token_type: Expected token type

    Returns:
        Decoded token payload as dictionary

    Raises:
        HTTPException: If token is invalid, expired, or wrong type
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not token or not isinstance(token, str):
        logger.error("JWT verification error: token missing or not a string")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization token is missing. Send header: Authorization: Bearer <access_token>",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = token.strip()
    # JWT has 3 base64 segments separated by dots
    if token.count(".") != 2:
        logger.error("JWT verification error: Not enough segments")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format. Send header: Authorization: Bearer <access_token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.error(f"JWT verification error: {e}")
        raise credentials_exception

    token_type_in_payload = payload.get("type")
    if token_type_in_payload != token_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token type. Expected {token_type}, got {token_type_in_payload}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload
