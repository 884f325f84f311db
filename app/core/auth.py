"""
FastAPI dependencies for JWT authentication
"""
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.utils.jwt import verify_token
from app.models.identity import Identity
from app.models.subscription import IdentityRole

# HTTPBearer security scheme for FastAPI
security = HTTPBearer()


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Identity:
    """
    FastAPI dependency to get the caller identity from the JWT token.

    The identity service has already validated the account; the ledger treats
    the "sub" claim as an opaque reference.

    Usage:
        @router.get("/protected")
        async def protected_route(identity: Identity = Depends(get_current_identity)):
            return {"id": identity.id}

    Raises:
        HTTPException: If token is invalid, expired, or lacks a subject
    """
    payload = verify_token(credentials.credentials, token_type="access")

    # Standard JWT claim "sub" for subject
    identity_id: Optional[str] = payload.get("sub")
    if identity_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing user ID",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        role = IdentityRole(payload.get("role", IdentityRole.USER.value))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unsupported role '{payload.get('role')}'",
        )

    return Identity(id=identity_id, role=role)


async def get_current_trainer(
    identity: Identity = Depends(get_current_identity)
) -> Identity:
    """
    FastAPI dependency that only admits trainers.

    Raises:
        HTTPException: If the caller is not a trainer
    """
    if not identity.is_trainer:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Trainer role required"
        )
    return identity
