from fastapi import APIRouter
from pydantic import BaseModel, Field
from typing import List, Optional
from tortoise.expressions import Q

from models.doctor import Doctor, Specialization
from helpers.errors import NotFoundError, ValidationError
from helpers.jwt_token import CurrentDoctor
from helpers.serializers import doctor_detail


doctor_router = APIRouter(prefix="/doctors")


class AvailabilitySlot(BaseModel):
    day: str
    startTime: str
    endTime: str


class UpdateDoctorPayload(BaseModel):
    bio: Optional[str] = None
    photo: Optional[str] = None
    experience: Optional[int] = Field(default=None, ge=0, le=70)
    consultationFee: Optional[int] = Field(default=None, ge=0)
    qualifications: Optional[List[str]] = None
    availableSlots: Optional[List[AvailabilitySlot]] = None
    isAvailable: Optional[bool] = None


def matching_specializations(search: str) -> List[Specialization]:
    needle = search.lower()
    return [s for s in Specialization if needle in s.value.lower()]


@doctor_router.get("")
async def get_doctors(specialization: Optional[str] = None, search: Optional[str] = None):
    query = Doctor.filter(is_available=True)

    if specialization:
        try:
            query = query.filter(specialization=Specialization(specialization))
        except ValueError:
            # unknown specialization matches nobody
            return {"message": "Doctors retrieved successfully", "data": []}

    if search:
        condition = Q(name__icontains=search)
        specializations = matching_specializations(search)
        if specializations:
            condition |= Q(specialization__in=specializations)
        query = query.filter(condition)

    doctors = await query.order_by("-rating", "id")
    return {
        "message": "Doctors retrieved successfully",
        "data": [doctor_detail(d) for d in doctors],
    }


@doctor_router.get("/specializations")
async def get_specializations():
    values = await Doctor.all().distinct().values_list("specialization", flat=True)
    specializations = sorted({Specialization(v).value for v in values})
    return {
        "message": "Specializations retrieved successfully",
        "data": specializations,
    }


@doctor_router.put("/profile")
async def update_doctor_profile(payload: UpdateDoctorPayload, doctor: CurrentDoctor):
    updates = payload.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationError("Nothing to update")

    if "bio" in updates:
        doctor.bio = payload.bio or ""
    if "photo" in updates:
        doctor.photo = payload.photo
    if payload.experience is not None:
        doctor.experience = payload.experience
    if payload.consultationFee is not None:
        doctor.consultation_fee = payload.consultationFee
    if payload.qualifications is not None:
        doctor.qualifications = payload.qualifications
    if payload.availableSlots is not None:
        doctor.available_slots = [slot.model_dump() for slot in payload.availableSlots]
    if payload.isAvailable is not None:
        doctor.is_available = payload.isAvailable
    await doctor.save()

    return {
        "message": "Doctor profile updated successfully",
        "data": doctor_detail(doctor),
    }


@doctor_router.get("/{doctor_id}")
async def get_doctor_by_id(doctor_id: int):
    doctor = await Doctor.get_or_none(id=doctor_id)
    if not doctor:
        raise NotFoundError("Doctor not found")
    return {
        "message": "Doctor retrieved successfully",
        "data": doctor_detail(doctor),
    }
