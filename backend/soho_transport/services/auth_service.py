"""
Auth Service - registration, credential checks and token rotation

Handles:
- Registration with number plate assignment for vehicle-bound roles
- Login (bcrypt check, access + refresh token pair)
- Refresh token rotation
- Active number plate listing for the registration form
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, or_
from typing import List, Optional

from soho_transport.core.exceptions import AuthServiceError, AuthErrorKind, SohoError
from soho_transport.core.logging_config import logger
from soho_transport.core.security import (
    build_token_claims,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from soho_transport.models.number_plate import NumberPlate, PlateStatus
from soho_transport.models.user import PLATE_BOUND_ROLES, User, UserRole
from soho_transport.schemas.auth import (
    AuthenticatedUser,
    AuthSession,
    RegisteredUser,
    UserLogin,
    UserRegister,
)


class AuthService:
    """Service for user accounts and tokens"""

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def is_active_number_plate(self, db: AsyncSession, plate_number: str) -> bool:
        result = await db.execute(
            select(NumberPlate.id).where(
                NumberPlate.plate_number == plate_number,
                NumberPlate.status == PlateStatus.ACTIVE,
            )
        )
        return result.first() is not None

    async def register(self, db: AsyncSession, payload: UserRegister) -> RegisteredUser:
        """
        Register a new user.

        Raises:
            AuthServiceError: DUPLICATE_USER, NUMBER_PLATE_REQUIRED or NUMBER_PLATE_NOT_FOUND
        """
        email = payload.email.strip().lower()
        phone_number = payload.phone_number.strip()
        role = UserRole(payload.role.strip())
        number_plate = (payload.number_plate or "").strip().upper()

        existing = await db.execute(
            select(User.id).where(or_(User.email == email, User.phone_number == phone_number))
        )
        if existing.first() is not None:
            logger.log_auth_event(event="register", success=False, user_email=email,
                                  reason="Email or phone already registered")
            raise AuthServiceError(AuthErrorKind.DUPLICATE_USER)

        if role in PLATE_BOUND_ROLES:
            if not number_plate:
                raise AuthServiceError(AuthErrorKind.NUMBER_PLATE_REQUIRED)
            if not await self.is_active_number_plate(db, number_plate):
                logger.log_auth_event(event="register", success=False, user_email=email,
                                      reason=f"Unknown number plate {number_plate}")
                raise AuthServiceError(AuthErrorKind.NUMBER_PLATE_NOT_FOUND)
        else:
            number_plate = ""

        user = User(
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            email=email,
            phone_number=phone_number,
            number_plate=number_plate or None,
            role=role,
            password_hash=get_password_hash(payload.password),
        )
        db.add(user)

        try:
            await db.commit()
        except IntegrityError:
            # Lost a race on the unique email / phone columns
            await db.rollback()
            logger.log_auth_event(event="register", success=False, user_email=email,
                                  reason="Unique constraint violated")
            raise AuthServiceError(AuthErrorKind.DUPLICATE_USER)

        logger.log_auth_event(event="register", success=True, user_email=email, user_role=role.value)
        return RegisteredUser(email=email, role=role)

    def issue_session(self, user: User) -> AuthSession:
        """Sign a fresh access/refresh pair for the user"""
        claims = build_token_claims(user.id, user.email, user.role.value)
        return AuthSession(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
            user=AuthenticatedUser.model_validate(user),
        )

    async def login(self, db: AsyncSession, payload: UserLogin) -> Optional[AuthSession]:
        """Return a session, or None when the email or password is wrong"""
        user = await self.get_user_by_email(db, payload.email)

        if not user or not verify_password(payload.password, user.password_hash):
            logger.log_auth_event(event="login", success=False, user_email=payload.email,
                                  reason="Invalid credentials")
            return None

        logger.log_auth_event(event="login", success=True, user_email=user.email, user_role=user.role.value)
        return self.issue_session(user)

    async def refresh_session(self, db: AsyncSession, refresh_token: str) -> Optional[AuthSession]:
        """
        Rotate a refresh token.

        Returns None when the token is invalid or expired, or when its user no
        longer exists. Old refresh tokens stay valid until they expire.
        """
        try:
            claims = decode_refresh_token(refresh_token)
        except SohoError as e:
            logger.log_auth_event(event="refresh", success=False, reason=e.message)
            return None

        user = await self.get_user_by_email(db, claims["email"])
        if not user:
            logger.log_auth_event(event="refresh", success=False, user_email=claims["email"],
                                  reason="User no longer exists")
            return None

        logger.log_auth_event(event="refresh", success=True, user_email=user.email)
        return self.issue_session(user)

    async def list_number_plates(self, db: AsyncSession) -> List[str]:
        """Active plate numbers, ascending"""
        result = await db.execute(
            select(NumberPlate.plate_number)
            .where(NumberPlate.status == PlateStatus.ACTIVE)
            .order_by(NumberPlate.plate_number.asc())
        )
        return list(result.scalars().all())


auth_service = AuthService()
