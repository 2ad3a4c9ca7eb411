from dataclasses import dataclass

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth", auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: int
    role_id: int


async def get_current_principal(request: Request, token: str = Depends(oauth2_scheme)) -> Principal:
    """Dependency to validate the JWT and return who is calling and with which role."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    
    if not token:
        raise credentials_exception
        
    payload = verify_access_token(token)
    if payload is None:
        raise credentials_exception

    try:
        principal = Principal(user_id=int(payload["sub"]), role_id=int(payload["role_id"]))
    except (KeyError, TypeError, ValueError):
        raise credentials_exception

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = principal.user_id
    return principal


def require_role(role_id: int):
    """Dependency factory: only principals holding exactly ``role_id`` get through."""

    async def _check_role(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role_id != role_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return principal

    return _check_role
