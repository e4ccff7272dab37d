import os

os.environ["DATABASE_URI"] = "sqlite://:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["FRONTEND_URL"] = "http://localhost:5173"
# empty values keep a local .env from switching real mail delivery on
for name in ("SMTP_FROM_USER", "SMTP_SERVER", "SMTP_PORT", "SMTP_FROM_ADDRESS", "SMTP_PASSWORD"):
    os.environ[name] = ""

import pytest
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from main import app
from helpers.tortoise_config import TORTOISE_CONFIG
from helpers.credentials import hash_password
from helpers.jwt_token import generate_user_token
from models.user import User, UserRole
from models.doctor import Doctor, Specialization


TEST_CONFIG = {
    **TORTOISE_CONFIG,
    "apps": {
        "models": {
            "models": [m for m in TORTOISE_CONFIG["apps"]["models"]["models"] if m != "aerich.models"],
        }
    },
}


@pytest.fixture(autouse=True)
async def db():
    await Tortoise.init(config=TEST_CONFIG)
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Captures mail instead of sending it: ("otp", email, code) / ("reset", email, url)."""
    sent = []

    async def fake_deliver_otp(to_email, code):
        sent.append(("otp", to_email, code))
        return True

    async def fake_deliver_password_reset(to_email, reset_url):
        sent.append(("reset", to_email, reset_url))
        return True

    monkeypatch.setattr("controllers.auth_controller.deliver_otp", fake_deliver_otp)
    monkeypatch.setattr("controllers.password_controller.deliver_password_reset", fake_deliver_password_reset)
    return sent


@pytest.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test/api") as c:
        yield c


@pytest.fixture
def make_user():
    async def factory(name="Alice", email=None, password="secret1", role=UserRole.PATIENT, verified=True):
        return await User.create(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@x.com",
            password=hash_password(password),
            role=role,
            is_verified=verified,
        )

    return factory


@pytest.fixture
def make_doctor(make_user):
    async def factory(name="Dr. House", specialization=Specialization.GENERAL_PRACTITIONER, consultation_fee=500, **fields):
        user = await make_user(name=name, role=UserRole.DOCTOR)
        return await Doctor.create(
            user=user,
            name=name,
            specialization=specialization,
            consultation_fee=consultation_fee,
            **fields,
        )

    return factory


@pytest.fixture
def auth():
    def headers(user_or_id):
        user_id = getattr(user_or_id, "id", user_or_id)
        return {"Authorization": f"Bearer {generate_user_token(user_id)}"}

    return headers
