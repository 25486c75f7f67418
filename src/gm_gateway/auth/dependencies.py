"""Bearer-token dependencies for protected routes.

    @router.post("/orders")
    async def place(actor: Annotated[Actor, Depends(get_current_actor)]): ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.gm_common.actor import Actor
from src.gm_common.database import get_db_session
from src.gm_common.errors import AccountDisabledError, InvalidCredentialsError, UnauthorizedError
from src.gm_gateway.auth.jwt_handler import decode_token
from src.gm_gateway.user.service import get_user

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


def _unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_actor(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Actor:
    """Resolve the token's subject against the users table.

    Missing, forged or expired tokens and unknown users get a 401 with a
    ``WWW-Authenticate`` challenge; a disabled account gets 403.
    """
    try:
        subject = decode_token(token, expected_type="access").get("sub")
    except InvalidCredentialsError:
        raise _unauthenticated() from None

    user = await get_user(db, subject) if subject else None
    if user is None:
        raise _unauthenticated()
    if not user.is_active:
        raise AccountDisabledError()
    return user.to_actor()


async def require_admin(actor: Annotated[Actor, Depends(get_current_actor)]) -> Actor:
    if not actor.is_admin:
        raise UnauthorizedError("Admin role required")
    return actor
