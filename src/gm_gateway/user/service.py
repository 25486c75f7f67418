"""Accounts: registration, credential checks, token refresh and user lookups.

Register runs inside the router's ``async with db.begin()``; the rest is
read-only.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.enums import Role
from src.gm_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    PhoneExistsError,
    UsernameExistsError,
)
from src.gm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.gm_gateway.auth.password import hash_password, verify_password
from src.gm_gateway.user.db_models import UserModel


class UserService:
    """Stateless: instantiate once, reuse across requests."""

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: str,
        db: AsyncSession,
        phone: str | None = None,
    ) -> UserModel:
        # unique constraints still backstop a concurrent duplicate
        checks = [
            (UserModel.username == username, UsernameExistsError),
            (UserModel.email == email, EmailExistsError),
        ]
        if phone is not None:
            checks.append((UserModel.phone == phone, PhoneExistsError))
        for clause, error in checks:
            result = await db.execute(select(UserModel.id).where(clause))
            if result.scalar_one_or_none() is not None:
                raise error()

        user = UserModel(
            username=username,
            email=email,
            phone=phone,
            password_hash=hash_password(password),
            role=Role.parse(role).value,
            is_active=True,
        )
        db.add(user)
        await db.flush()
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Return (user, access_token, refresh_token).

        Unknown user and wrong password raise the same error.
        """
        result = await db.execute(select(UserModel).where(UserModel.username == username))
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return user, create_access_token(str(user.id)), create_refresh_token(str(user.id))

    async def refresh(self, refresh_token: str, db: AsyncSession) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        user = await get_user(db, str(payload["sub"]))
        if user is None:
            raise InvalidRefreshTokenError()
        if not user.is_active:
            raise AccountDisabledError()
        return create_access_token(str(user.id))


async def get_user(db: AsyncSession, user_id: str) -> UserModel | None:
    try:
        key = uuid.UUID(user_id)
    except ValueError:
        return None
    result = await db.execute(select(UserModel).where(UserModel.id == key))
    return result.scalar_one_or_none()


async def get_user_email(db: AsyncSession, user_id: str) -> str | None:
    user = await get_user(db, user_id)
    return user.email if user else None
