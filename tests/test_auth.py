from datetime import timedelta

from helpers.credentials import utcnow
from models.user import User, UserRole
from models.doctor import Doctor


ALICE = {"name": "Alice", "email": "alice@x.com", "password": "secret1", "role": "patient"}


def last_otp(outbox, email):
    return [code for kind, to, code in outbox if kind == "otp" and to == email][-1]


async def test_register_stores_pending_user_and_sends_otp(client, outbox):
    response = await client.post("/auth/register", json=ALICE)

    assert response.status_code == 201
    assert response.json() == {"message": "User registered. OTP sent to your email.", "email": "alice@x.com"}

    user = await User.get(email="alice@x.com")
    assert user.is_verified is False
    assert user.role == UserRole.PATIENT
    assert user.password != "secret1"
    assert len(user.otp) == 6 and user.otp.isdigit()
    assert user.otp_expiry > utcnow() + timedelta(minutes=9)
    assert last_otp(outbox, "alice@x.com") == user.otp


async def test_login_before_verification_is_rejected(client):
    await client.post("/auth/register", json=ALICE)

    for password in ("secret1", "wrong-password"):
        response = await client.post("/auth/login", json={"email": "alice@x.com", "password": password})
        assert response.status_code == 400
        assert response.json()["message"] == "Please verify your email first"


async def test_verify_then_login_returns_token_and_user(client, outbox):
    await client.post("/auth/register", json=ALICE)

    response = await client.post(
        "/auth/verify-otp", json={"email": "alice@x.com", "otp": last_otp(outbox, "alice@x.com")}
    )
    assert response.status_code == 200
    user = await User.get(email="alice@x.com")
    assert user.is_verified is True
    assert user.otp is None and user.otp_expiry is None

    response = await client.post("/auth/login", json={"email": "alice@x.com", "password": "secret1"})
    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["user"]["role"] == "patient"
    assert body["user"]["email"] == "alice@x.com"

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.json()["data"]["id"] == user.id


async def test_otp_verification_alias(client, outbox):
    await client.post("/auth/register", json=ALICE)
    response = await client.post(
        "/auth/otp-verification", json={"email": "alice@x.com", "otp": last_otp(outbox, "alice@x.com")}
    )
    assert response.status_code == 200


async def test_otp_sent_as_a_json_number_is_accepted(client):
    await client.post("/auth/register", json=ALICE)
    await User.filter(email="alice@x.com").update(otp="654321")

    response = await client.post("/auth/verify-otp", json={"email": "alice@x.com", "otp": 654321})

    assert response.status_code == 200
    assert (await User.get(email="alice@x.com")).is_verified


async def test_expired_otp_is_rejected_even_when_it_matches(client, outbox):
    await client.post("/auth/register", json=ALICE)
    otp = last_otp(outbox, "alice@x.com")
    await User.filter(email="alice@x.com").update(otp_expiry=utcnow() - timedelta(seconds=1))

    response = await client.post("/auth/verify-otp", json={"email": "alice@x.com", "otp": otp})

    assert response.status_code == 400
    assert response.json()["message"] == "OTP has expired"
    assert (await User.get(email="alice@x.com")).is_verified is False


async def test_wrong_otp_changes_nothing(client, outbox):
    await client.post("/auth/register", json=ALICE)
    otp = last_otp(outbox, "alice@x.com")
    wrong = "000000" if otp != "000000" else "111111"

    response = await client.post("/auth/verify-otp", json={"email": "alice@x.com", "otp": wrong})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid OTP"
    user = await User.get(email="alice@x.com")
    assert user.is_verified is False
    assert user.otp == otp


async def test_verify_unknown_and_already_verified(client, make_user):
    response = await client.post("/auth/verify-otp", json={"email": "nobody@x.com", "otp": "123456"})
    assert response.json()["message"] == "User not found"

    await make_user(email="done@x.com")
    response = await client.post("/auth/verify-otp", json={"email": "done@x.com", "otp": "123456"})
    assert response.status_code == 400
    assert response.json()["message"] == "Email already verified"


async def test_duplicate_registration_is_rejected(client):
    await client.post("/auth/register", json=ALICE)
    response = await client.post("/auth/register", json={**ALICE, "name": "Other Alice"})

    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"
    assert await User.filter(email="alice@x.com").count() == 1


async def test_register_input_validation(client):
    cases = [
        ({"email": "a@x.com", "password": "secret1"}, "Please provide all required fields"),
        ({**ALICE, "email": "not-an-email"}, "Please provide a valid email address"),
        ({**ALICE, "password": "123"}, "Password must be at least 6 characters"),
        ({**ALICE, "role": "admin"}, "Invalid role"),
        ({**ALICE, "role": "nurse"}, "Invalid role"),
    ]
    for payload, message in cases:
        response = await client.post("/auth/register", json=payload)
        assert response.status_code == 400
        assert response.json()["message"] == message
    assert await User.all().count() == 0


async def test_doctor_registration_creates_doctor_record(client):
    response = await client.post("/auth/register", json={
        "name": "Dr. Who", "email": "who@x.com", "password": "secret1", "role": "doctor",
        "specialization": "Cardiology", "experience": 9, "consultationFee": 750,
    })
    assert response.status_code == 201

    doctor = await Doctor.get(user__email="who@x.com")
    assert doctor.name == "Dr. Who"
    assert doctor.consultation_fee == 750
    assert doctor.specialization.value == "Cardiology"


async def test_doctor_registration_needs_specialization(client):
    response = await client.post("/auth/register", json={
        "name": "Dr. Who", "email": "who@x.com", "password": "secret1", "role": "doctor",
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Please provide a valid specialization"
    assert not await User.filter(email="who@x.com").exists()


async def test_otp_delivery_failure_keeps_registration(client, monkeypatch):
    async def broken(to_email, code):
        raise ConnectionError("smtp down")

    monkeypatch.setattr("controllers.auth_controller.deliver_otp", broken)
    response = await client.post("/auth/register", json=ALICE)

    assert response.status_code == 201
    assert await User.filter(email="alice@x.com").exists()


async def test_resend_otp_regenerates_code(client, outbox):
    await client.post("/auth/register", json=ALICE)
    await User.filter(email="alice@x.com").update(otp="999999", otp_expiry=utcnow() - timedelta(minutes=1))

    response = await client.post("/auth/resend-otp", json={"email": "alice@x.com"})
    assert response.status_code == 200

    user = await User.get(email="alice@x.com")
    assert user.otp == last_otp(outbox, "alice@x.com")
    assert user.otp_expiry > utcnow()

    verify = await client.post("/auth/verify-otp", json={"email": "alice@x.com", "otp": user.otp})
    assert verify.status_code == 200

    again = await client.post("/auth/resend-otp", json={"email": "alice@x.com"})
    assert again.status_code == 400
    assert again.json()["message"] == "Email already verified"


async def test_login_with_wrong_password_or_unknown_email(client, make_user):
    await make_user(email="bob@x.com", password="secret1")

    for payload in ({"email": "bob@x.com", "password": "nope123"}, {"email": "ghost@x.com", "password": "secret1"}):
        response = await client.post("/auth/login", json=payload)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid email or password"
