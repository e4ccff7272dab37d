from fastapi import APIRouter
from pydantic import BaseModel
from typing import List, Optional
import datetime
import logging

from models.user import User, UserRole
from models.profile import Profile, Gender, PHONE_PATTERN
from helpers.errors import AuthorizationError, NotFoundError, ValidationError
from helpers.jwt_token import CurrentUser
from helpers.serializers import profile_detail


logger = logging.getLogger(__name__)

profile_router = APIRouter(prefix="/profile")


class MedicalHistoryEntry(BaseModel):
    condition: str
    date: Optional[datetime.date] = None
    notes: str = ""


class UpdateProfilePayload(BaseModel):
    dateOfBirth: Optional[datetime.date] = None
    gender: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    medicalHistory: Optional[List[MedicalHistoryEntry]] = None


class AddMedicalHistoryPayload(BaseModel):
    condition: Optional[str] = None
    notes: Optional[str] = None


async def _load_owner(user_id: int, caller: User, allow_doctor: bool = False) -> User:
    owner = await User.get_or_none(id=user_id)
    if not owner:
        raise NotFoundError("User not found")
    if caller.id == owner.id or caller.role == UserRole.ADMIN:
        return owner
    if allow_doctor and caller.role == UserRole.DOCTOR:
        return owner
    raise AuthorizationError("You can only access your own profile")


async def _get_or_create_profile(owner: User) -> Profile:
    profile, created = await Profile.get_or_create(user=owner)
    if created:
        logger.info("Created profile for user %s", owner.id)
    return profile


def _history_entry(condition: str, notes: str = "", date: Optional[datetime.date] = None) -> dict:
    return {
        "condition": condition,
        "date": (date or datetime.date.today()).isoformat(),
        "notes": notes,
    }


@profile_router.get("/{user_id}")
async def get_profile(user_id: int, caller: CurrentUser):
    owner = await _load_owner(user_id, caller, allow_doctor=True)
    profile = await _get_or_create_profile(owner)
    return {
        "message": "Profile retrieved successfully",
        "data": profile_detail(profile, owner),
    }


@profile_router.put("/{user_id}")
async def update_profile(user_id: int, payload: UpdateProfilePayload, caller: CurrentUser):
    owner = await _load_owner(user_id, caller)
    updates = payload.model_dump(exclude_unset=True)

    gender = None
    if "gender" in updates:
        try:
            gender = Gender(payload.gender or "")
        except ValueError:
            raise ValidationError("Invalid gender")
    if payload.phone and not PHONE_PATTERN.fullmatch(payload.phone):
        raise ValidationError("Invalid phone number format")

    profile = await _get_or_create_profile(owner)
    if "dateOfBirth" in updates:
        profile.date_of_birth = payload.dateOfBirth
    if gender is not None:
        profile.gender = gender
    if "phone" in updates:
        profile.phone = payload.phone or ""
    if "address" in updates:
        profile.address = payload.address or ""
    if payload.medicalHistory is not None:
        profile.medical_history = [
            _history_entry(entry.condition, entry.notes, entry.date) for entry in payload.medicalHistory
        ]
    await profile.save()

    return {
        "message": "Profile updated successfully",
        "data": profile_detail(profile, owner),
    }


@profile_router.post("/{user_id}/medical-history", status_code=201)
async def add_medical_history(user_id: int, payload: AddMedicalHistoryPayload, caller: CurrentUser):
    if not payload.condition:
        raise ValidationError("Medical condition is required")

    owner = await _load_owner(user_id, caller)
    profile = await _get_or_create_profile(owner)
    profile.medical_history = [*profile.medical_history, _history_entry(payload.condition, payload.notes or "")]
    await profile.save()

    return {
        "message": "Medical history added successfully",
        "data": profile_detail(profile, owner),
    }
