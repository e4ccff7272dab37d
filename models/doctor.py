from tortoise import fields
from tortoise.models import Model
from tortoise.validators import MinValueValidator, MaxValueValidator
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.appointment import Appointment


class Specialization(Enum):
    CARDIOLOGY = "Cardiology"
    ORTHOPEDIC = "Orthopedic"
    DERMATOLOGY = "Dermatology"
    PEDIATRICS = "Pediatrics"
    PSYCHIATRY = "Psychiatry"
    NEUROLOGY = "Neurology"
    GASTROENTEROLOGY = "Gastroenterology"
    OPHTHALMOLOGY = "Ophthalmology"
    GENERAL_PRACTITIONER = "General Practitioner"
    DENTAL = "Dental"


class Doctor(Model):
    id = fields.IntField(primary_key=True)
    user = fields.OneToOneField("models.User", related_name="doctor", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=255)
    specialization = fields.CharEnumField(enum_type=Specialization, max_length=50)
    experience = fields.IntField(default=0, validators=[MinValueValidator(0), MaxValueValidator(70)])
    consultation_fee = fields.IntField(default=500)
    qualifications = fields.JSONField(default=list)
    bio = fields.TextField(default="")
    photo = fields.CharField(max_length=500, null=True)
    rating = fields.FloatField(default=4.5, validators=[MinValueValidator(0), MaxValueValidator(5)])
    review_count = fields.IntField(default=0)
    available_slots = fields.JSONField(default=list)  # [{"day", "startTime", "endTime"}]
    is_available = fields.BooleanField(default=True)

    appointments: fields.ReverseRelation["Appointment"]

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "doctors"
