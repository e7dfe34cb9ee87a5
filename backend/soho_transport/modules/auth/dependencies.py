from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Callable, Optional

from soho_transport.core.exceptions import AuthenticationError
from soho_transport.core.logging_config import set_user_id
from soho_transport.core.security import decode_access_token
from soho_transport.models.user import UserRole
from soho_transport.schemas.auth import TokenClaims

# auto_error=False so a missing header gets our own 401 envelope instead of a 403
security = HTTPBearer(auto_error=False)


async def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaims:
    """Decode the bearer access token"""
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token is missing.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(credentials.credentials)
    except AuthenticationError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired access token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = TokenClaims(sub=str(payload["sub"]), email=payload["email"], role=payload["role"])
    set_user_id(claims.sub)
    return claims


def require_roles(*roles: UserRole) -> Callable:
    """
    Dependency factory restricting an endpoint to the given roles.

    Usage:
        @router.get("/", dependencies=[Depends(require_roles(UserRole.SCHOOL_ADMIN))])
    """
    allowed = {role.value for role in roles}

    async def check_role(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission for this resource.",
            )
        return claims

    return check_role


require_school_admin = require_roles(UserRole.SCHOOL_ADMIN)
require_driver = require_roles(UserRole.DRIVER)
