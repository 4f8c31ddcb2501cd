"""JWT identity extraction and role-gated dependencies."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from nodecms.core.config import settings
from nodecms.schemas.schemas import Identity

# JWT bearer scheme; a missing token means an anonymous caller.
security_scheme = HTTPBearer(auto_error=False)


def create_access_token(uid: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token whose subject is the user id."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRY_MINUTES)
    )
    to_encode = {"sub": uid, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_uid(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Optional[str]:
    """User id from the bearer token, or None for anonymous requests."""
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    uid = payload.get("sub")
    if uid is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return str(uid)


class RequireRole:
    """Dependency that checks the caller has been assigned a role."""

    def __init__(self, role_name: str):
        self.role_name = role_name

    async def __call__(
        self,
        request: Request,
        uid: Optional[str] = Depends(get_current_uid),
    ) -> str:
        if uid is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )
        users = request.app.state.services.users
        user = await users.find_user(Identity(uid=uid))
        if user is None or self.role_name not in user.roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{self.role_name}' required.",
            )
        return uid


require_admin = RequireRole(settings.ADMIN_ROLE)
