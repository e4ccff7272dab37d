from tortoise import fields
from tortoise.models import Model
from enum import Enum
import re


PHONE_PATTERN = re.compile(r"^[\+]?[(]?[0-9]{3}[)]?[-\s\.]?[0-9]{3}[-\s\.]?[0-9]{4,6}$")


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNSET = ""


class Profile(Model):
    id = fields.IntField(primary_key=True)
    user = fields.OneToOneField("models.User", related_name="profile", on_delete=fields.CASCADE)
    date_of_birth = fields.DateField(null=True)
    gender = fields.CharEnumField(enum_type=Gender, max_length=10, default=Gender.UNSET)
    phone = fields.CharField(max_length=30, default="")
    address = fields.TextField(default="")
    medical_history = fields.JSONField(default=list)  # [{"condition", "date", "notes"}]

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "profiles"
