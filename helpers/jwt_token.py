import jwt
import logging
import os
from datetime import datetime, timedelta, timezone
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi import Depends, Request
from typing import Annotated, Optional
from models.user import User, UserRole
from models.doctor import Doctor
from helpers.errors import AuthenticationError, AuthorizationError, NotFoundError, ServerError


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

TOKEN_LIFETIME = timedelta(days=30)


def _jwt_key() -> str:
    jwt_key = os.getenv("JWT_SECRET")
    if not jwt_key:
        raise ValueError("JWT_SECRET environment variable is not set")
    return jwt_key


def generate_user_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {"id": user_id, "iat": now, "exp": now + TOKEN_LIFETIME}
    return jwt.encode(payload, _jwt_key(), algorithm='HS256')


def decode_user_token(token: str) -> dict:
    try:
        return jwt.decode(token, _jwt_key(), algorithms=['HS256'])
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid or expired token")


async def get_current_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> User:
    """Resolve the bearer token to a user and attach it to ``request.state``."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")

    payload = decode_user_token(credentials.credentials)
    user_id = payload.get("id")
    if user_id is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        user = await User.get_or_none(id=user_id)
    except Exception as e:
        logger.exception("User lookup failed during authentication")
        raise ServerError(f"Authentication error: {e}")

    if not user:
        raise AuthenticationError("User not found")

    request.state.user = user
    request.state.user_id = user.id
    return user


def require_role(role: UserRole, denied_message: str):
    async def dependency(user: Annotated[Optional[User], Depends(get_current_user)]) -> User:
        if not user:
            raise AuthenticationError("User not authenticated")
        if user.role != role:
            raise AuthorizationError(denied_message)
        return user

    return dependency


require_admin = require_role(UserRole.ADMIN, "Access denied. Admin only.")
require_doctor = require_role(UserRole.DOCTOR, "Access denied. Doctor only.")


async def get_current_doctor(user: Annotated[User, Depends(require_doctor)]) -> Doctor:
    doctor = await Doctor.get_or_none(user_id=user.id)
    if not doctor:
        raise NotFoundError("Doctor profile not found")
    return doctor


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin)]
DoctorUser = Annotated[User, Depends(require_doctor)]
CurrentDoctor = Annotated[Doctor, Depends(get_current_doctor)]
