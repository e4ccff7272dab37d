from tortoise import fields
from tortoise.models import Model
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.prescription import Prescription


class AppointmentStatus(Enum):
    BOOKED = "booked"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# status -> statuses it may move to; terminal states map to nothing
STATUS_TRANSITIONS = {
    AppointmentStatus.BOOKED: {AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.CONFIRMED: {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED},
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.CANCELLED: set(),
}


def make_slot_key(doctor_id: int, date, time: str) -> str:
    return f"{doctor_id}:{date.isoformat()}:{time}"


class Appointment(Model):
    id = fields.IntField(primary_key=True)
    patient = fields.ForeignKeyField("models.User", related_name="appointments", on_delete=fields.RESTRICT)
    # kept after the doctor is removed, with the link cleared
    doctor = fields.ForeignKeyField(
        "models.Doctor", related_name="appointments", null=True, on_delete=fields.SET_NULL
    )
    date = fields.DateField()
    time = fields.CharField(max_length=20)
    status = fields.CharEnumField(enum_type=AppointmentStatus, max_length=20, default=AppointmentStatus.BOOKED)
    consultation_fee = fields.IntField()
    is_paid = fields.BooleanField(default=False)
    notes = fields.TextField(default="")
    reason = fields.TextField(default="")
    cancellation_reason = fields.TextField(default="")

    # Unique while the booking holds its slot, NULL once cancelled.
    slot_key = fields.CharField(max_length=100, null=True, unique=True)

    prescription: fields.BackwardOneToOneRelation["Prescription"]

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "appointments"

    def can_transition_to(self, status: AppointmentStatus) -> bool:
        return status in STATUS_TRANSITIONS[self.status]
