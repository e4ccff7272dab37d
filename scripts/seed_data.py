import asyncio
import logging

from helpers.tortoise_config import TORTOISE_CONFIG
from tortoise import Tortoise
from models.user import User, UserRole
from models.doctor import Doctor, Specialization
from helpers.credentials import hash_password


logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("seed_data")

DOCTOR_PASSWORD = "password123"
ADMIN_EMAIL = "admin@carenest.com"
ADMIN_PASSWORD = "admin123"

WEEKDAY_SLOTS = [
    {"day": day, "startTime": "09:00", "endTime": "17:00"}
    for day in ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
]

DOCTORS = [
    {"name": "Dr. Rajesh Kumar", "specialization": Specialization.CARDIOLOGY, "experience": 12, "consultation_fee": 500},
    {"name": "Dr. Priya Singh", "specialization": Specialization.DERMATOLOGY, "experience": 8, "consultation_fee": 400},
    {"name": "Dr. Amit Patel", "specialization": Specialization.ORTHOPEDIC, "experience": 15, "consultation_fee": 600},
    {"name": "Dr. Neha Sharma", "specialization": Specialization.PEDIATRICS, "experience": 10, "consultation_fee": 350},
    {"name": "Dr. Suresh Verma", "specialization": Specialization.NEUROLOGY, "experience": 18, "consultation_fee": 700},
    {"name": "Dr. Anjali Gupta", "specialization": Specialization.GENERAL_PRACTITIONER, "experience": 6, "consultation_fee": 300},
    {"name": "Dr. Vikram Singh", "specialization": Specialization.GASTROENTEROLOGY, "experience": 14, "consultation_fee": 550},
    {"name": "Dr. Kavita Rao", "specialization": Specialization.PSYCHIATRY, "experience": 11, "consultation_fee": 650},
    {"name": "Dr. Manoj Iyer", "specialization": Specialization.OPHTHALMOLOGY, "experience": 9, "consultation_fee": 450},
    {"name": "Dr. Sneha Reddy", "specialization": Specialization.DENTAL, "experience": 7, "consultation_fee": 300},
]


def doctor_email(name: str) -> str:
    return f"{name.lower().replace(' ', '.')}@carenest.com"


async def seed():
    await Doctor.all().delete()
    await User.all().delete()

    password = hash_password(DOCTOR_PASSWORD)
    for data in DOCTORS:
        user = await User.create(
            name=data["name"],
            email=doctor_email(data["name"]),
            password=password,
            role=UserRole.DOCTOR,
            is_verified=True,
        )
        await Doctor.create(
            user=user,
            qualifications=["MBBS"],
            available_slots=WEEKDAY_SLOTS,
            **data,
        )
        logger.info("Created doctor %s", data["name"])

    await User.create(
        name="Admin",
        email=ADMIN_EMAIL,
        password=hash_password(ADMIN_PASSWORD),
        role=UserRole.ADMIN,
        is_verified=True,
    )
    logger.info("Created admin %s", ADMIN_EMAIL)


async def main():
    await Tortoise.init(config=TORTOISE_CONFIG)
    try:
        await Tortoise.generate_schemas(safe=True)
        await seed()
    finally:
        await Tortoise.close_connections()


if __name__ == "__main__":
    asyncio.run(main())
