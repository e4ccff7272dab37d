from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict
from typing import Optional
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction
from email_validator import validate_email, EmailNotValidError
import logging

from models.user import User, UserRole
from models.doctor import Doctor, Specialization
from helpers.credentials import (
    MIN_PASSWORD_LENGTH,
    generate_otp,
    hash_password,
    is_expired,
    otp_expiry,
    verify_password,
)
from helpers.email import deliver_otp
from helpers.errors import ConflictError, ValidationError
from helpers.jwt_token import CurrentUser, generate_user_token
from helpers.serializers import user_summary


logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth")


class RegisterPayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    specialization: Optional[str] = None
    experience: Optional[int] = None
    consultationFee: Optional[int] = None


class VerifyOtpPayload(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    email: Optional[str] = None
    otp: Optional[str] = None


class LoginPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ResendOtpPayload(BaseModel):
    email: Optional[str] = None


def _is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


@auth_router.post("/register", status_code=201)
async def register(payload: RegisterPayload):
    if not payload.name or not payload.email or not payload.password:
        raise ValidationError("Please provide all required fields")
    if not _is_valid_email(payload.email):
        raise ValidationError("Please provide a valid email address")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    try:
        role = UserRole(payload.role or UserRole.PATIENT.value)
    except ValueError:
        raise ValidationError("Invalid role")
    if role == UserRole.ADMIN:
        raise ValidationError("Invalid role")

    specialization = None
    if role == UserRole.DOCTOR:
        try:
            specialization = Specialization(payload.specialization)
        except ValueError:
            raise ValidationError("Please provide a valid specialization")
        if payload.experience is not None and not 0 <= payload.experience <= 70:
            raise ValidationError("Experience must be between 0 and 70 years")

    if await User.filter(email=payload.email).exists():
        raise ConflictError("Email already registered")

    otp = generate_otp()
    try:
        async with in_transaction():
            user = await User.create(
                name=payload.name,
                email=payload.email,
                password=hash_password(payload.password),
                role=role,
                otp=otp,
                otp_expiry=otp_expiry(),
                is_verified=False,
            )
            if role == UserRole.DOCTOR:
                await Doctor.create(
                    user=user,
                    name=payload.name,
                    specialization=specialization,
                    experience=payload.experience or 0,
                    consultation_fee=payload.consultationFee if payload.consultationFee is not None else 500,
                )
    except IntegrityError:
        raise ConflictError("Email already registered")
    logger.info("Registered %s user %s", role.value, user.id)

    # registration stands even if the mail cannot be sent
    try:
        if not await deliver_otp(payload.email, otp):
            logger.error("OTP email to %s was not delivered", payload.email)
    except Exception as e:
        logger.error("OTP email to %s failed: %s", payload.email, e)

    return {
        "message": "User registered. OTP sent to your email.",
        "email": payload.email,
    }


async def _verify_otp(payload: VerifyOtpPayload):
    if not payload.email or not payload.otp:
        raise ValidationError("Please provide email and OTP")

    user = await User.get_or_none(email=payload.email)
    if not user:
        raise ValidationError("User not found")
    if user.is_verified:
        raise ValidationError("Email already verified")
    if user.otp != payload.otp:
        raise ValidationError("Invalid OTP")
    if is_expired(user.otp_expiry):
        raise ValidationError("OTP has expired")

    user.is_verified = True
    user.otp = None
    user.otp_expiry = None
    await user.save()
    logger.info("User %s verified their email", user.id)

    return {"message": "Email verified successfully. You can now login."}


@auth_router.post("/verify-otp")
async def verify_otp(payload: VerifyOtpPayload):
    return await _verify_otp(payload)


@auth_router.post("/otp-verification")
async def otp_verification(payload: VerifyOtpPayload):
    return await _verify_otp(payload)


@auth_router.post("/login")
async def login(payload: LoginPayload):
    if not payload.email or not payload.password:
        raise ValidationError("Please provide email and password")

    user = await User.get_or_none(email=payload.email)
    if not user:
        raise ValidationError("Invalid email or password")
    if not user.is_verified:
        raise ValidationError("Please verify your email first")
    if not verify_password(user.password, payload.password):
        raise ValidationError("Invalid email or password")

    token = generate_user_token(user.id)
    logger.info("User %s logged in", user.id)
    return {
        "message": "Login successful",
        "token": token,
        "user": user_summary(user),
    }


@auth_router.post("/resend-otp")
async def resend_otp(payload: ResendOtpPayload):
    if not payload.email:
        raise ValidationError("Please provide email")

    user = await User.get_or_none(email=payload.email)
    if not user:
        raise ValidationError("User not found")
    if user.is_verified:
        raise ValidationError("Email already verified")

    user.otp = generate_otp()
    user.otp_expiry = otp_expiry()
    await user.save()

    if not await deliver_otp(user.email, user.otp):
        logger.error("OTP email to %s was not delivered", user.email)

    return {"message": "OTP resent to your email"}


@auth_router.get("/me")
async def me(user: CurrentUser):
    return {"message": "Token is valid", "data": user_summary(user)}
