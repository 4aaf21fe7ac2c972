# food_delivery_api/app/api/endpoints/auth.py
from typing import Any
from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_auth_service, get_current_user_id
from app.schemas.token import TokenResponse, RefreshTokenRequest
from app.schemas.user import (
    User as UserSchema, LoginRequest, RegisterRequest,
    PasswordResetEmailRequest, PasswordResetRequest, ChangePasswordRequest,
)
from app.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials"}},
)
async def login(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    login_in: LoginRequest,
) -> Any:
    """
    Returns a new access/refresh token pair.

    Only one session per user is kept: logging in again invalidates the
    tokens issued by the previous login.
    """
    return await auth_service.login(email=login_in.email, password=login_in.password)


@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def register(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    user_in: RegisterRequest,
) -> Any:
    """Creates a user. No tokens are issued, the client logs in afterwards."""
    return await auth_service.register(user_in)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    refresh_request: RefreshTokenRequest,
) -> Any:
    """Exchanges a valid refresh token for a new pair; the old pair is revoked."""
    return await auth_service.refresh(refresh_request.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    user_id: int = Depends(get_current_user_id),
):
    await auth_service.logout(user_id)
    return None


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def initiate_password_reset(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    request_body: PasswordResetEmailRequest,
):
    await auth_service.initiate_password_reset(request_body.email)
    return {"message": "Reset code sent"}


@router.post("/password-reset/confirm")
async def submit_reset_code(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    request_body: PasswordResetRequest,
):
    await auth_service.submit_reset_code(
        email=request_body.email,
        reset_code=request_body.reset_code,
        new_password=request_body.new_password,
    )
    return {"message": "Password has been reset"}


@router.post("/change-password", response_model=TokenResponse)
async def change_password(
    *,
    auth_service: AuthService = Depends(get_auth_service),
    request_body: ChangePasswordRequest,
    user_id: int = Depends(get_current_user_id),
) -> Any:
    """Changes the password and returns a fresh pair; the current session is revoked."""
    return await auth_service.change_password(
        old_password=request_body.old_password,
        new_password=request_body.new_password,
        user_id=user_id,
    )
