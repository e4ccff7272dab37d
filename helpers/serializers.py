from datetime import date
from typing import Optional
from models.user import User
from models.doctor import Doctor
from models.profile import Profile
from models.appointment import Appointment
from models.prescription import Prescription


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def user_summary(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "avatar": user.avatar,
    }


def user_detail(user: User) -> dict:
    return {
        **user_summary(user),
        "isVerified": user.is_verified,
        "createdAt": _iso(user.created_at),
    }


def doctor_summary(doctor: Doctor) -> dict:
    return {
        "id": doctor.id,
        "name": doctor.name,
        "specialization": doctor.specialization.value,
        "photo": doctor.photo,
        "consultationFee": doctor.consultation_fee,
    }


def doctor_detail(doctor: Doctor, include_user: bool = False) -> dict:
    data = {
        "id": doctor.id,
        "name": doctor.name,
        "specialization": doctor.specialization.value,
        "experience": doctor.experience,
        "consultationFee": doctor.consultation_fee,
        "qualifications": doctor.qualifications,
        "bio": doctor.bio,
        "photo": doctor.photo,
        "rating": doctor.rating,
        "reviewCount": doctor.review_count,
        "availableSlots": doctor.available_slots,
        "isAvailable": doctor.is_available,
        "createdAt": _iso(doctor.created_at),
    }
    if include_user:
        data["userId"] = doctor.user_id
    return data


def profile_detail(profile: Profile, user: Optional[User] = None) -> dict:
    return {
        "id": profile.id,
        "userId": user_summary(user) if user else profile.user_id,
        "dateOfBirth": _iso(profile.date_of_birth),
        "gender": profile.gender.value,
        "phone": profile.phone,
        "address": profile.address,
        "medicalHistory": profile.medical_history,
        "updatedAt": _iso(profile.updated_at),
    }


def appointment_detail(appointment: Appointment, doctor: Optional[Doctor] = None, patient: Optional[User] = None) -> dict:
    """Appointment as JSON; related rows are expanded when passed in."""
    return {
        "id": appointment.id,
        "patientId": {"id": patient.id, "name": patient.name, "email": patient.email} if patient else appointment.patient_id,
        "doctorId": doctor_summary(doctor) if doctor else appointment.doctor_id,
        "date": _iso(appointment.date),
        "time": appointment.time,
        "status": appointment.status.value,
        "consultationFee": appointment.consultation_fee,
        "isPaid": appointment.is_paid,
        "notes": appointment.notes,
        "reason": appointment.reason,
        "cancellationReason": appointment.cancellation_reason,
        "createdAt": _iso(appointment.created_at),
        "updatedAt": _iso(appointment.updated_at),
    }


def prescription_detail(prescription: Prescription) -> dict:
    return {
        "id": prescription.id,
        "appointmentId": prescription.appointment_id,
        "patientId": prescription.patient_id,
        "doctorId": prescription.doctor_id,
        "medicines": prescription.medicines,
        "diagnosis": prescription.diagnosis,
        "instructions": prescription.instructions,
        "date": _iso(prescription.date),
    }
