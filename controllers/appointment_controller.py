from fastapi import APIRouter
from pydantic import BaseModel
from typing import List, Optional
import datetime
from tortoise.exceptions import IntegrityError
import logging

from models.user import User, UserRole
from models.doctor import Doctor
from models.appointment import Appointment, AppointmentStatus, make_slot_key
from models.prescription import Prescription, MedicineFrequency
from helpers.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from helpers.jwt_token import AdminUser, CurrentDoctor, CurrentUser
from helpers.serializers import appointment_detail, prescription_detail


logger = logging.getLogger(__name__)

appointment_router = APIRouter(prefix="/appointments")


class BookAppointmentPayload(BaseModel):
    doctorId: Optional[int] = None
    date: Optional[datetime.date] = None
    time: Optional[str] = None
    reason: Optional[str] = None


class CancelAppointmentPayload(BaseModel):
    reason: Optional[str] = None


class UpdateStatusPayload(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None
    cancellationReason: Optional[str] = None


class MedicinePayload(BaseModel):
    name: str
    dosage: str
    frequency: MedicineFrequency
    duration: str


class PrescriptionPayload(BaseModel):
    medicines: Optional[List[MedicinePayload]] = None
    diagnosis: Optional[str] = None
    instructions: Optional[str] = None


async def _get_appointment(appointment_id: int) -> Appointment:
    appointment = await Appointment.get_or_none(id=appointment_id).prefetch_related("doctor", "patient")
    if not appointment:
        raise NotFoundError("Appointment not found")
    return appointment


def _can_view(user: User, appointment: Appointment) -> bool:
    if user.role == UserRole.ADMIN:
        return True
    if appointment.patient_id == user.id:
        return True
    return (
        user.role == UserRole.DOCTOR
        and appointment.doctor is not None
        and appointment.doctor.user_id == user.id
    )


def _release_slot(appointment: Appointment):
    appointment.status = AppointmentStatus.CANCELLED
    appointment.slot_key = None


@appointment_router.post("", status_code=201)
async def book_appointment(payload: BookAppointmentPayload, user: CurrentUser):
    time = (payload.time or "").strip()
    if not payload.doctorId or not payload.date or not time:
        raise ValidationError("Please provide all required fields")
    if user.role != UserRole.PATIENT:
        raise AuthorizationError("Only patients can book appointments")

    doctor = await Doctor.get_or_none(id=payload.doctorId)
    if not doctor:
        raise NotFoundError("Doctor not found")
    if not doctor.is_available:
        raise ValidationError("Doctor is not accepting appointments")

    taken = await Appointment.filter(
        doctor_id=doctor.id,
        date=payload.date,
        time=time,
        status__not=AppointmentStatus.CANCELLED,
    ).exists()
    if taken:
        raise ConflictError("This slot is already booked")

    try:
        appointment = await Appointment.create(
            patient=user,
            doctor=doctor,
            date=payload.date,
            time=time,
            reason=payload.reason or "",
            consultation_fee=doctor.consultation_fee,
            slot_key=make_slot_key(doctor.id, payload.date, time),
        )
    except IntegrityError:
        # a concurrent booking won the slot between the check and the insert
        raise ConflictError("This slot is already booked")

    logger.info("Appointment %s booked with doctor %s on %s %s", appointment.id, doctor.id, payload.date, time)
    return {
        "message": "Appointment booked successfully",
        "data": appointment_detail(appointment, doctor=doctor),
    }


@appointment_router.get("")
async def get_all_appointments(admin: AdminUser):
    appointments = await Appointment.all().prefetch_related("doctor", "patient").order_by("-date", "-time")
    return {
        "message": "Appointments retrieved",
        "count": len(appointments),
        "data": [appointment_detail(a, doctor=a.doctor, patient=a.patient) for a in appointments],
    }


@appointment_router.get("/patient")
async def get_patient_appointments(user: CurrentUser):
    appointments = await Appointment.filter(patient_id=user.id).prefetch_related("doctor").order_by("-date", "-time")
    return {
        "message": "Patient appointments retrieved",
        "data": [appointment_detail(a, doctor=a.doctor) for a in appointments],
    }


async def _doctor_appointments(doctor_id: int) -> list:
    appointments = await Appointment.filter(doctor_id=doctor_id).prefetch_related("patient").order_by("-date", "-time")
    return [appointment_detail(a, patient=a.patient) for a in appointments]


@appointment_router.get("/doctor")
async def get_my_doctor_appointments(doctor: CurrentDoctor):
    return {
        "message": "Doctor appointments retrieved",
        "data": await _doctor_appointments(doctor.id),
    }


@appointment_router.get("/doctor/{doctor_id}")
async def get_doctor_appointments(doctor_id: int, user: CurrentUser):
    doctor = await Doctor.get_or_none(id=doctor_id)
    if not doctor:
        raise NotFoundError("Doctor not found")
    if user.role != UserRole.ADMIN and doctor.user_id != user.id:
        raise AuthorizationError("You can only view your own appointments")
    return {
        "message": "Doctor appointments retrieved",
        "data": await _doctor_appointments(doctor.id),
    }


@appointment_router.get("/{appointment_id}")
async def get_appointment_by_id(appointment_id: int, user: CurrentUser):
    appointment = await _get_appointment(appointment_id)
    if not _can_view(user, appointment):
        raise AuthorizationError("You are not allowed to view this appointment")
    return {
        "message": "Appointment retrieved",
        "data": appointment_detail(appointment, doctor=appointment.doctor, patient=appointment.patient),
    }


@appointment_router.get("/{appointment_id}/prescription")
async def get_prescription(appointment_id: int, user: CurrentUser):
    appointment = await _get_appointment(appointment_id)
    if not _can_view(user, appointment):
        raise AuthorizationError("You are not allowed to view this appointment")

    prescription = await Prescription.get_or_none(appointment_id=appointment.id)
    if not prescription:
        raise NotFoundError("Prescription not found")
    return {
        "message": "Prescription retrieved",
        "data": prescription_detail(prescription),
    }


@appointment_router.put("/{appointment_id}/status")
async def update_appointment_status(appointment_id: int, payload: UpdateStatusPayload, doctor: CurrentDoctor):
    try:
        status = AppointmentStatus(payload.status)
    except ValueError:
        raise ValidationError("Invalid status")

    appointment = await _get_appointment(appointment_id)
    if appointment.doctor_id != doctor.id:
        raise AuthorizationError("You can only update your own appointments")
    if not appointment.can_transition_to(status):
        raise ValidationError(f"Cannot change status from {appointment.status.value} to {status.value}")

    previous = appointment.status
    if status == AppointmentStatus.CANCELLED:
        _release_slot(appointment)
        appointment.cancellation_reason = payload.cancellationReason or ""
    else:
        appointment.status = status
    if payload.notes is not None:
        appointment.notes = payload.notes
    await appointment.save()

    logger.info("Appointment %s moved from %s to %s by doctor %s", appointment.id, previous.value, status.value, doctor.id)
    return {
        "message": "Appointment status updated successfully",
        "data": appointment_detail(appointment, doctor=appointment.doctor, patient=appointment.patient),
    }


@appointment_router.put("/{appointment_id}/cancel")
async def cancel_appointment(appointment_id: int, user: CurrentUser, payload: Optional[CancelAppointmentPayload] = None):
    appointment = await _get_appointment(appointment_id)

    if appointment.patient_id != user.id:
        raise AuthorizationError("You can only cancel your own appointments")
    if appointment.status == AppointmentStatus.CANCELLED:
        raise ValidationError("Appointment is already cancelled")
    if appointment.status == AppointmentStatus.COMPLETED:
        raise ValidationError("Cannot cancel completed appointment")

    _release_slot(appointment)
    if payload and payload.reason:
        appointment.cancellation_reason = payload.reason
    await appointment.save()

    logger.info("Appointment %s cancelled by patient %s", appointment.id, user.id)
    return {
        "message": "Appointment cancelled successfully",
        "data": appointment_detail(appointment, doctor=appointment.doctor),
    }


@appointment_router.post("/{appointment_id}/prescription", status_code=201)
async def add_prescription(appointment_id: int, payload: PrescriptionPayload, doctor: CurrentDoctor):
    appointment = await _get_appointment(appointment_id)

    if appointment.doctor_id != doctor.id:
        raise AuthorizationError("You can only add prescriptions to your own appointments")
    if not payload.medicines:
        raise ValidationError("Please provide at least one medicine")
    if not payload.diagnosis:
        raise ValidationError("Diagnosis is required")
    if appointment.status == AppointmentStatus.CANCELLED:
        raise ValidationError("Cannot add a prescription to a cancelled appointment")
    if await Prescription.filter(appointment_id=appointment.id).exists():
        raise ConflictError("Prescription already exists for this appointment")

    try:
        prescription = await Prescription.create(
            appointment=appointment,
            patient_id=appointment.patient_id,
            doctor=doctor,
            medicines=[m.model_dump(mode="json") for m in payload.medicines],
            diagnosis=payload.diagnosis,
            instructions=payload.instructions or "",
        )
    except IntegrityError:
        raise ConflictError("Prescription already exists for this appointment")

    logger.info("Prescription %s added to appointment %s", prescription.id, appointment.id)
    return {
        "message": "Prescription added successfully",
        "data": prescription_detail(prescription),
    }
