from datetime import date

import pytest

from models.appointment import Appointment, AppointmentStatus, make_slot_key
from models.doctor import Doctor
from models.prescription import Prescription
from models.user import User, UserRole


@pytest.fixture
async def admin(make_user):
    return await make_user(name="Root", role=UserRole.ADMIN)


async def test_list_users_patients_and_doctors(client, make_user, make_doctor, auth, admin):
    await make_user(name="Alice")
    await make_user(name="Bob")
    await make_doctor(name="Dr. D")
    headers = auth(admin)

    users = (await client.get("/admin/users", headers=headers)).json()
    assert users["count"] == 4
    for user in users["data"]:
        assert "password" not in user
        assert "otp" not in user
        assert "resetToken" not in user

    patients = (await client.get("/admin/patients", headers=headers)).json()
    assert patients["count"] == 2
    assert {p["role"] for p in patients["data"]} == {"patient"}

    doctors = (await client.get("/admin/doctors", headers=headers)).json()
    assert doctors["count"] == 1
    assert doctors["data"][0]["email"] == "dr..d@x.com"


async def test_get_doctor(client, make_doctor, auth, admin):
    doctor = await make_doctor()

    response = await client.get(f"/admin/doctors/{doctor.id}", headers=auth(admin))
    assert response.json()["data"]["userId"] == doctor.user_id

    assert (await client.get("/admin/doctors/9999", headers=auth(admin))).status_code == 404


async def test_delete_doctor_cascades_to_user(client, make_doctor, auth, admin):
    doctor = await make_doctor()
    user_id = doctor.user_id

    response = await client.delete(f"/admin/doctors/{doctor.id}", headers=auth(admin))

    assert response.status_code == 200
    assert not await Doctor.filter(id=doctor.id).exists()
    assert not await User.filter(id=user_id).exists()

    again = await client.delete(f"/admin/doctors/{doctor.id}", headers=auth(admin))
    assert again.status_code == 404


async def test_delete_doctor_keeps_appointment_history(client, make_user, make_doctor, auth, admin):
    patient = await make_user()
    doctor = await make_doctor()
    appointment = await Appointment.create(
        patient=patient,
        doctor=doctor,
        date=date(2025, 1, 10),
        time="09:00",
        consultation_fee=doctor.consultation_fee,
        slot_key=make_slot_key(doctor.id, date(2025, 1, 10), "09:00"),
    )
    prescription = await Prescription.create(
        appointment=appointment, patient=patient, doctor=doctor, medicines=[], diagnosis="Flu"
    )

    response = await client.delete(f"/admin/doctors/{doctor.id}", headers=auth(admin))
    assert response.status_code == 200

    appointment = await Appointment.get(id=appointment.id)
    assert appointment.doctor_id is None
    assert appointment.slot_key is None
    assert appointment.status == AppointmentStatus.BOOKED
    prescription = await Prescription.get(id=prescription.id)
    assert prescription.doctor_id is None
    assert prescription.diagnosis == "Flu"

    mine = (await client.get("/appointments/patient", headers=auth(patient))).json()["data"]
    assert [(a["id"], a["doctorId"]) for a in mine] == [(appointment.id, None)]
    detail = await client.get(f"/appointments/{appointment.id}", headers=auth(patient))
    assert detail.status_code == 200
    assert detail.json()["data"]["doctorId"] is None
    kept = await client.get(f"/appointments/{appointment.id}/prescription", headers=auth(patient))
    assert kept.json()["data"]["doctorId"] is None


async def test_users_cannot_be_deleted_directly(client, make_user, auth, admin):
    patient = await make_user()

    response = await client.delete(f"/admin/users/{patient.id}", headers=auth(admin))

    assert response.status_code == 404
    assert await User.filter(id=patient.id).exists()


async def test_admin_routes_reject_non_admins(client, make_user, auth):
    patient = await make_user()
    for method, path in (("GET", "/admin/users"), ("GET", "/admin/patients"), ("DELETE", "/admin/doctors/1")):
        response = await client.request(method, path, headers=auth(patient))
        assert response.status_code == 403
