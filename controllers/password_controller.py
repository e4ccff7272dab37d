from fastapi import APIRouter
from pydantic import BaseModel
from typing import Optional
import logging
import os

from models.user import User
from helpers.credentials import (
    generate_reset_token,
    hash_password,
    hash_reset_token,
    reset_token_expiry,
    utcnow,
    validate_new_password,
    verify_password,
)
from helpers.email import deliver_password_reset
from helpers.errors import AuthenticationError, NotFoundError, ServerError, ValidationError
from helpers.jwt_token import CurrentUser


logger = logging.getLogger(__name__)

password_router = APIRouter(prefix="/password")


class ForgotPasswordPayload(BaseModel):
    email: Optional[str] = None


class ResetPasswordPayload(BaseModel):
    token: Optional[str] = None
    newPassword: Optional[str] = None
    confirmPassword: Optional[str] = None


class ChangePasswordPayload(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None
    confirmPassword: Optional[str] = None


def reset_url_for(token: str) -> str:
    frontend_url = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
    return f"{frontend_url}/reset-password/{token}"


@password_router.post("/forgot-password")
async def forgot_password(payload: ForgotPasswordPayload):
    if not payload.email:
        raise ValidationError("Please provide an email address")

    user = await User.get_or_none(email=payload.email)
    if not user:
        raise NotFoundError("User not found with this email")

    token = generate_reset_token()
    user.reset_token = hash_reset_token(token)
    user.reset_token_expiry = reset_token_expiry()
    await user.save()

    try:
        delivered = await deliver_password_reset(user.email, reset_url_for(token))
    except Exception as e:
        logger.error("Password reset email to %s failed: %s", user.email, e)
        delivered = False

    if not delivered:
        # no reset window may outlive a mail that never went out
        user.reset_token = None
        user.reset_token_expiry = None
        await user.save()
        raise ServerError("Failed to send reset email")

    logger.info("Password reset email sent to user %s", user.id)
    return {
        "message": "Password reset email sent successfully",
        "email": user.email,
    }


@password_router.post("/reset-password")
async def reset_password(payload: ResetPasswordPayload):
    if not payload.token or not payload.newPassword or not payload.confirmPassword:
        raise ValidationError("Please provide all required fields")
    validate_new_password(payload.newPassword, payload.confirmPassword)

    user = await User.get_or_none(
        reset_token=hash_reset_token(payload.token),
        reset_token_expiry__gt=utcnow(),
    )
    if not user:
        raise ValidationError("Invalid or expired reset token")

    user.password = hash_password(payload.newPassword)
    user.reset_token = None
    user.reset_token_expiry = None
    await user.save()
    logger.info("Password reset for user %s", user.id)

    return {
        "message": "Password reset successfully",
        "email": user.email,
    }


@password_router.post("/change-password")
async def change_password(payload: ChangePasswordPayload, user: CurrentUser):
    if not payload.currentPassword or not payload.newPassword or not payload.confirmPassword:
        raise ValidationError("Please provide all required fields")
    validate_new_password(payload.newPassword, payload.confirmPassword, "New passwords do not match")

    if not verify_password(user.password, payload.currentPassword):
        raise AuthenticationError("Current password is incorrect")
    if verify_password(user.password, payload.newPassword):
        raise ValidationError("New password cannot be the same as current password")

    user.password = hash_password(payload.newPassword)
    await user.save()
    logger.info("Password changed for user %s", user.id)

    return {
        "message": "Password changed successfully",
        "email": user.email,
    }
