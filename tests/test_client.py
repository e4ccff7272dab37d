import json

import pytest
from httpx import ASGITransport

from client.api import ApiError, CareNestClient
from client.session_store import FileSessionStore, MemorySessionStore
from main import app


@pytest.fixture
async def api():
    async with CareNestClient(base_url="http://test/api", transport=ASGITransport(app=app)) as c:
        yield c


async def test_full_patient_journey(api, outbox, make_doctor):
    doctor = await make_doctor(name="Dr. D", consultation_fee=650)

    await api.register("Alice", "alice@x.com", "secret1")
    with pytest.raises(ApiError) as excinfo:
        await api.login("alice@x.com", "secret1")
    assert excinfo.value.status_code == 400
    assert excinfo.value.message == "Please verify your email first"
    assert not api.is_authenticated

    otp = [code for kind, to, code in outbox if kind == "otp"][-1]
    await api.verify_otp("alice@x.com", otp)
    user = await api.login("alice@x.com", "secret1")

    assert api.is_authenticated
    assert api.current_user == user
    assert user["role"] == "patient"
    assert (await api.me())["email"] == "alice@x.com"

    appointment = await api.book_appointment(doctor.id, "2025-01-10", "09:00")
    assert appointment["consultationFee"] == 650
    assert [a["id"] for a in await api.get_patient_appointments()] == [appointment["id"]]

    cancelled = await api.cancel_appointment(appointment["id"])
    assert cancelled["status"] == "cancelled"

    api.logout()
    assert not api.is_authenticated


async def test_unauthorized_response_clears_session(api, make_user):
    await make_user()
    api.store.set({"token": "stale-token", "user": {"id": 1}})

    with pytest.raises(ApiError) as excinfo:
        await api.me()

    assert excinfo.value.status_code == 401
    assert api.store.get() is None


async def test_directory_calls(api, make_doctor):
    await make_doctor(name="Dr. D")

    doctors = await api.get_doctors(search="dr. d")
    assert [d["name"] for d in doctors] == ["Dr. D"]
    assert await api.get_specializations() == ["General Practitioner"]


def test_memory_store_lifecycle():
    store = MemorySessionStore()
    assert store.token is None

    store.set({"token": "abc", "user": {"id": 7}})
    assert store.token == "abc"
    assert store.user == {"id": 7}

    store.clear()
    assert store.get() is None


def test_file_store_hydrates_and_clears(tmp_path):
    path = tmp_path / "session.json"
    FileSessionStore(str(path)).set({"token": "abc", "user": {"id": 7}})

    restored = FileSessionStore(str(path))
    assert restored.token == "abc"
    assert json.loads(path.read_text()) == {"token": "abc", "user": {"id": 7}}

    restored.clear()
    assert not path.exists()
    assert FileSessionStore(str(path)).get() is None


def test_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json")

    assert FileSessionStore(str(path)).get() is None
