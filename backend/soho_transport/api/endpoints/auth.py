from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from soho_transport.api.responses import envelope, error_envelope
from soho_transport.core.config import settings
from soho_transport.core.database import get_db
from soho_transport.core.rate_limiter import login_rate_limit, refresh_rate_limit, register_rate_limit
from soho_transport.modules.auth.dependencies import get_current_claims
from soho_transport.schemas.auth import (
    AuthSession,
    NumberPlateList,
    RefreshTokenRequest,
    TokenClaims,
    UserLogin,
    UserRegister,
)
from soho_transport.services.auth_service import auth_service

router = APIRouter()


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.REFRESH_COOKIE_MAX_AGE,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.IS_PRODUCTION,
        samesite="lax",
    )


def _session_data(session: AuthSession) -> dict:
    """Token pair plus user summary; `token` mirrors accessToken for older clients"""
    user = session.user.to_json()
    return {
        **user,
        "token": session.access_token,
        "accessToken": session.access_token,
        "refreshToken": session.refresh_token,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
@register_rate_limit()
async def register(
    request: Request,
    payload: UserRegister,
    db: AsyncSession = Depends(get_db),
):
    """Register a Parent, Driver, Bus Assistant or Transport Manager (rate limited)"""
    user = await auth_service.register(db, payload)
    return envelope("Registration successful.", user.to_json())


@router.post("/login")
@login_rate_limit()
async def login(
    request: Request,
    response: Response,
    payload: UserLogin,
    db: AsyncSession = Depends(get_db),
):
    """Exchange credentials for an access token; the refresh token is also set as a cookie"""
    session = await auth_service.login(db, payload)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid login credentials.",
        )

    _set_refresh_cookie(response, session.refresh_token)
    return envelope("Login successful.", _session_data(session))


@router.post("/refresh")
@refresh_rate_limit()
async def refresh(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    refresh_cookie: Optional[str] = Cookie(default=None, alias=settings.REFRESH_COOKIE_NAME),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the token pair using the refresh token from the body or cookie"""
    refresh_token = (payload.refresh_token if payload else None) or refresh_cookie
    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Refresh token is missing.",
        )

    session = await auth_service.refresh_session(db, refresh_token)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token.",
        )

    _set_refresh_cookie(response, session.refresh_token)
    return envelope("Token refreshed successfully.", _session_data(session))


@router.get("/number-plates")
async def list_number_plates(db: AsyncSession = Depends(get_db)):
    """Active number plates for the registration form"""
    plates = await auth_service.list_number_plates(db)
    return envelope("Number plates retrieved successfully.", NumberPlateList(number_plates=plates).to_json())


@router.get("/me")
async def me(claims: TokenClaims = Depends(get_current_claims)):
    return envelope("Authenticated user retrieved.", claims.to_json())


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.IS_PRODUCTION,
        samesite="lax",
    )
    return envelope("Logout successful.")


# ==================== Method guards ====================

def _method_not_allowed(action: str):
    async def handler():
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content=error_envelope(f"Method not allowed. Use POST /api/auth/{action}."),
            headers={"Allow": "POST"},
        )
    handler.__name__ = f"{action}_method_not_allowed"
    return handler


for _action in ("register", "login", "refresh"):
    router.add_api_route(
        f"/{_action}",
        _method_not_allowed(_action),
        methods=["GET", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
