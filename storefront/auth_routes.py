"""
Authentication routes for the admin area.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.auth import AuthService, ClientInfo
from storefront.db import AdminUserRecord
from storefront.dependencies import get_auth_service, get_client_info, get_current_user
from storefront.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    VerifyResponse,
)

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    """
    Exchange username (or email) and password for a bearer token.

    401 on bad credentials, 403 for a disabled account, 423 while locked.
    """
    result = auth.login(
        payload.username, payload.password, remember=payload.remember, client=client
    )
    return LoginResponse(
        token=result.token, expires_in=result.expires_in, user=result.user.as_dict()
    )


@router.get("/verify", response_model=VerifyResponse)
def verify(user: AdminUserRecord = Depends(get_current_user)):
    return VerifyResponse(user=user.as_dict())


@router.post("/logout", response_model=MessageResponse)
def logout(
    user: AdminUserRecord = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    auth.logout(user, client)
    return MessageResponse(message="Logged out")


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    user: AdminUserRecord = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
    client: ClientInfo = Depends(get_client_info),
):
    auth.change_password(user, payload.current_password, payload.new_password, client)
    return MessageResponse(message="Password updated")
