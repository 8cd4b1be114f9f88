"""
User Routes

POST /users/register - Register and start a session
POST /users/login - Login with email and password
POST /users/logout - End the session
GET /users/csrf-token - Get the session CSRF token
GET /users/profile - Get current user info
PUT /users/change-password - Change password (CSRF)
DELETE /users/account - Delete account and all data (CSRF)
POST /users/forgot-password - Request a reset link
POST /users/reset-password - Set a new password with a reset token
GET /users/dashboard - Counts and profile completeness
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from app.core.auth import csrf_protect, end_session, get_csrf_token, get_current_user, start_session
from app.core.errors import NotFoundError, ok
from app.schemas.schemas import (
    ChangePasswordRequest, DeleteAccountRequest, ForgotPasswordRequest, LoginRequest,
    RegisterRequest, ResetPasswordRequest,
)
from app.services.user_service import format_user, get_user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/register", status_code=201)
async def register(data: RegisterRequest, request: Request):
    """Create the account and its profile, then log the user in."""
    user = get_user_service().create_user(data.email, data.password, data.first_name, data.last_name)
    start_session(request, user["id"], user["email"])
    return ok({"user": user, "message": "User registered successfully"}, status_code=201)


@router.post("/login")
async def login(data: LoginRequest, request: Request):
    user = get_user_service().authenticate(data.email, data.password)
    start_session(request, user["id"], user["email"])
    return ok({"user": user, "message": "Login successful"})


@router.post("/logout")
async def logout(request: Request, user: dict = Depends(get_current_user)):
    end_session(request)
    return ok({"message": "Logout successful"})


@router.get("/csrf-token")
async def csrf_token(request: Request):
    return ok({"csrfToken": get_csrf_token(request)})


@router.get("/profile")
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    row = get_user_service().get_user_by_id(user["user_id"])
    if not row:
        raise NotFoundError("User not found")
    return ok({"user": format_user(row)})


@router.put("/change-password", dependencies=[Depends(csrf_protect)])
async def change_password(data: ChangePasswordRequest, user: dict = Depends(get_current_user)):
    get_user_service().change_password(user["user_id"], data.current_password, data.new_password)
    return ok({"message": "Password changed successfully"})


@router.delete("/account", dependencies=[Depends(csrf_protect)])
async def delete_account(
    request: Request,
    data: Optional[DeleteAccountRequest] = None,
    user: dict = Depends(get_current_user),
):
    """
    Permanently delete the account.

    Accounts with a password must confirm it in the body.
    """
    get_user_service().delete_account(user["user_id"], data.password if data else None)
    end_session(request)
    return ok({"message": "Account deleted successfully"})


@router.post("/forgot-password")
async def forgot_password(data: ForgotPasswordRequest):
    return ok(get_user_service().request_password_reset(data.email))


@router.post("/reset-password")
async def reset_password(data: ResetPasswordRequest):
    get_user_service().reset_password(data.token, data.new_password)
    return ok({"message": "Password has been reset successfully"})


@router.get("/dashboard")
async def dashboard(user: dict = Depends(get_current_user)):
    return ok(get_user_service().get_dashboard(user["user_id"]))
