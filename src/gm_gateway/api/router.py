"""Auth endpoints: register, login, refresh and the caller's own profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.gm_common.actor import Actor
from src.gm_common.database import get_db_session
from src.gm_common.errors import InvalidCredentialsError
from src.gm_common.response import ApiResponse, success_response
from src.gm_gateway.auth.dependencies import get_current_actor
from src.gm_gateway.user import service as user_service
from src.gm_gateway.user.db_models import UserModel
from src.gm_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from src.gm_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _user_info(user: UserModel) -> UserInfo:
    return UserInfo(
        user_id=str(user.id),
        username=user.username,
        email=user.email,
        phone=user.phone,
        role=user.role,
        is_active=user.is_active,
    )


def _respond(request: Request, data: dict, message: str) -> ApiResponse:
    resp = success_response(data, message=message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Create an account")
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user = await _service.register(
            body.username, body.email, body.password, body.role, db, phone=body.phone
        )

    data = RegisterResponse(
        **_user_info(user).model_dump(), created_at=user.created_at.isoformat()
    )
    return _respond(request, data.model_dump(), "User registered successfully")


@router.post("/login", summary="Exchange credentials for a token pair")
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, access_token, refresh_token = await _service.login(body.username, body.password, db)

    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=_user_info(user),
    )
    return _respond(request, data.model_dump(), "Login successful")


@router.post("/refresh", summary="Refresh access token")
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token, db)
    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return _respond(request, data.model_dump(), "Token refreshed")


@router.get("/me", summary="Current user's profile")
async def me(
    request: Request,
    actor: Annotated[Actor, Depends(get_current_actor)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user = await user_service.get_user(db, actor.id)
    if user is None:
        # deleted between token check and lookup
        raise InvalidCredentialsError()
    return _respond(request, _user_info(user).model_dump(), "OK")
