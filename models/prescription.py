from tortoise import fields
from tortoise.models import Model
from enum import Enum


class MedicineFrequency(Enum):
    ONCE_DAILY = "Once daily"
    TWICE_DAILY = "Twice daily"
    THRICE_DAILY = "Thrice daily"
    AS_NEEDED = "As needed"


class Prescription(Model):
    id = fields.IntField(primary_key=True)
    appointment = fields.OneToOneField("models.Appointment", related_name="prescription", on_delete=fields.RESTRICT)
    patient = fields.ForeignKeyField("models.User", related_name="prescriptions", on_delete=fields.RESTRICT)
    doctor = fields.ForeignKeyField(
        "models.Doctor", related_name="prescriptions", null=True, on_delete=fields.SET_NULL
    )
    medicines = fields.JSONField(default=list)  # [{"name", "dosage", "frequency", "duration"}]
    diagnosis = fields.TextField()
    instructions = fields.TextField(default="")
    date = fields.DatetimeField(auto_now_add=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "prescriptions"
