import uuid

from fastapi import APIRouter, Depends, Request, status

from cineman.auth.schemas import (
    RegisterUserRequest, LoginRequest, AccessTokenRequest, ConfirmEmailRequest,
    ChangeEmailRequest, ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest
)
from cineman.auth.service import AuthService
from cineman.auth.dependencies import get_auth_service, get_current_user_id
from cineman.responses import success_response, failure_response, no_content

router = APIRouter()

@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_user(
    body: RegisterUserRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    result = auth_service.register(body)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request, status_code=status.HTTP_201_CREATED)

@router.post("/login")
def login_user(
    body: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Login with email and password; returns a refresh token"""
    result = auth_service.login(body)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request, result.value)

@router.post("/refresh")
def refresh_access_token(
    body: AccessTokenRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Exchange a refresh token for an access token"""
    result = auth_service.refresh_access_token(body)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request, result.value)

@router.post("/confirm-email")
def confirm_email(
    body: ConfirmEmailRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Confirm an email address with the emailed token"""
    result = auth_service.confirm_email(body.token)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request)

@router.post("/change-email")
def change_email(
    body: ChangeEmailRequest,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Start an email change; the new address must be confirmed"""
    result = auth_service.change_email(body, user_id)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request)

@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Change the password of the current user"""
    result = auth_service.change_password(body, user_id)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request)

@router.post("/forgot-password")
def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Email a password reset token"""
    result = auth_service.forgot_password(body)
    if result.is_failure:
        return failure_response(request, result.error)
    return success_response(request)

@router.post("/reset-password", status_code=status.HTTP_204_NO_CONTENT)
def reset_password(
    body: ResetPasswordRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Reset the password with a token from forgot-password"""
    result = auth_service.reset_password(body)
    if result.is_failure:
        return failure_response(request, result.error)
    return no_content()
