from dotenv import load_dotenv
load_dotenv()
from tortoise import Tortoise
from contextlib import asynccontextmanager
import logging
import os


logger = logging.getLogger(__name__)

db_url = os.getenv("DATABASE_URI")
if not db_url:
    raise ValueError("DATABASE_URI environment variable is not set.")


TORTOISE_CONFIG = {

    'connections': {
        'default': db_url
    },
    "apps": {
        "models": {
            "models": [
                "models.user",
                "models.doctor",
                "models.profile",
                "models.appointment",
                "models.prescription",
                "aerich.models"
            ]
        }
    },
    "use_tz": True,
    "timezone": "UTC",
    }


def should_generate_schemas() -> bool:
    return os.getenv("DB_GENERATE_SCHEMAS", "").lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(_):
    if not os.getenv("JWT_SECRET"):
        raise ValueError("JWT_SECRET environment variable is not set.")
    await Tortoise.init(config=TORTOISE_CONFIG)
    if should_generate_schemas():
        await Tortoise.generate_schemas(safe=True)
    logger.info("Database connected")
    try:
        yield
    finally:
        await Tortoise.close_connections()
