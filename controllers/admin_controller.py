from fastapi import APIRouter
from tortoise.transactions import in_transaction
import logging

from models.user import User, UserRole
from models.doctor import Doctor
from models.appointment import Appointment
from helpers.errors import NotFoundError
from helpers.jwt_token import AdminUser
from helpers.serializers import doctor_detail, user_detail


logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/admin")


@admin_router.get("/users")
async def list_users(admin: AdminUser):
    users = await User.all().order_by("-created_at", "-id")
    return {
        "message": "Users retrieved successfully",
        "count": len(users),
        "data": [user_detail(u) for u in users],
    }


@admin_router.get("/patients")
async def list_patients(admin: AdminUser):
    patients = await User.filter(role=UserRole.PATIENT).order_by("-created_at", "-id")
    return {
        "message": "Patients retrieved successfully",
        "count": len(patients),
        "data": [user_detail(p) for p in patients],
    }


@admin_router.get("/doctors")
async def list_doctors(admin: AdminUser):
    doctors = await Doctor.all().prefetch_related("user").order_by("-created_at", "-id")
    return {
        "message": "Doctors retrieved successfully",
        "count": len(doctors),
        "data": [{**doctor_detail(d, include_user=True), "email": d.user.email} for d in doctors],
    }


@admin_router.get("/doctors/{doctor_id}")
async def get_doctor(doctor_id: int, admin: AdminUser):
    doctor = await Doctor.get_or_none(id=doctor_id).prefetch_related("user")
    if not doctor:
        raise NotFoundError("Doctor not found")
    return {
        "message": "Doctor retrieved successfully",
        "data": {**doctor_detail(doctor, include_user=True), "email": doctor.user.email},
    }


@admin_router.delete("/doctors/{doctor_id}")
async def delete_doctor(doctor_id: int, admin: AdminUser):
    doctor = await Doctor.get_or_none(id=doctor_id)
    if not doctor:
        raise NotFoundError("Doctor not found")

    async with in_transaction():
        user_id = doctor.user_id
        # appointment history stays; only the held slots go
        await Appointment.filter(doctor_id=doctor.id).update(slot_key=None)
        await doctor.delete()
        await User.filter(id=user_id).delete()

    logger.info("Admin %s deleted doctor %s and user %s", admin.id, doctor_id, user_id)
    return {"message": "Doctor deleted successfully"}

