from tortoise import fields
from tortoise.models import Model
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.doctor import Doctor
    from models.profile import Profile
    from models.appointment import Appointment


class UserRole(Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class User(Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255)
    email = fields.CharField(max_length=255, unique=True)
    password = fields.CharField(max_length=255)
    role = fields.CharEnumField(enum_type=UserRole, max_length=10, default=UserRole.PATIENT)
    avatar = fields.CharField(max_length=500, null=True)
    is_verified = fields.BooleanField(default=False)

    # transient credentials, cleared once consumed
    otp = fields.CharField(max_length=6, null=True)
    otp_expiry = fields.DatetimeField(null=True)
    reset_token = fields.CharField(max_length=64, null=True)
    reset_token_expiry = fields.DatetimeField(null=True)

    doctor: fields.ReverseRelation["Doctor"]
    profile: fields.ReverseRelation["Profile"]
    appointments: fields.ReverseRelation["Appointment"]

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "users"
