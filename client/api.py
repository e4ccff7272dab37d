from typing import Any, List, Optional
import httpx
import logging

from client.session_store import MemorySessionStore, SessionStore


logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, body: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.body = body or {}


class CareNestClient:
    """Async client for the CareNest API.

    The bearer token comes from ``store``; a successful login saves
    ``{"token", "user"}`` into it and ``logout`` or any 401 answer clears it.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000/api",
        store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.store = store or MemorySessionStore()
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.store.token is not None

    @property
    def current_user(self) -> Optional[dict]:
        return self.store.user

    async def request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None) -> dict:
        headers = {}
        if self.store.token:
            headers["Authorization"] = f"Bearer {self.store.token}"

        response = await self._http.request(method, path, json=json, params=params, headers=headers)
        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}

        if response.status_code == 401:
            self.store.clear()
        if response.is_error:
            raise ApiError(response.status_code, body.get("message", response.reason_phrase), body)
        return body

    # auth

    async def register(self, name: str, email: str, password: str, role: str = "patient", **doctor_fields) -> dict:
        return await self.request("POST", "/auth/register", json={
            "name": name, "email": email, "password": password, "role": role, **doctor_fields,
        })

    async def verify_otp(self, email: str, otp: str) -> dict:
        return await self.request("POST", "/auth/verify-otp", json={"email": email, "otp": otp})

    async def resend_otp(self, email: str) -> dict:
        return await self.request("POST", "/auth/resend-otp", json={"email": email})

    async def login(self, email: str, password: str) -> dict:
        body = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.store.set({"token": body["token"], "user": body["user"]})
        return body["user"]

    def logout(self):
        self.store.clear()

    async def me(self) -> dict:
        return (await self.request("GET", "/auth/me"))["data"]

    # password

    async def forgot_password(self, email: str) -> dict:
        return await self.request("POST", "/password/forgot-password", json={"email": email})

    async def reset_password(self, token: str, new_password: str, confirm_password: str) -> dict:
        return await self.request("POST", "/password/reset-password", json={
            "token": token, "newPassword": new_password, "confirmPassword": confirm_password,
        })

    async def change_password(self, current_password: str, new_password: str, confirm_password: str) -> dict:
        return await self.request("POST", "/password/change-password", json={
            "currentPassword": current_password, "newPassword": new_password, "confirmPassword": confirm_password,
        })

    # doctors

    async def get_doctors(self, specialization: Optional[str] = None, search: Optional[str] = None) -> List[dict]:
        params = {k: v for k, v in {"specialization": specialization, "search": search}.items() if v}
        return (await self.request("GET", "/doctors", params=params))["data"]

    async def get_doctor(self, doctor_id: int) -> dict:
        return (await self.request("GET", f"/doctors/{doctor_id}"))["data"]

    async def get_specializations(self) -> List[str]:
        return (await self.request("GET", "/doctors/specializations"))["data"]

    # appointments

    async def book_appointment(self, doctor_id: int, date: str, time: str, reason: str = "") -> dict:
        body = await self.request("POST", "/appointments", json={
            "doctorId": doctor_id, "date": date, "time": time, "reason": reason,
        })
        return body["data"]

    async def get_patient_appointments(self) -> List[dict]:
        return (await self.request("GET", "/appointments/patient"))["data"]

    async def get_doctor_appointments(self, doctor_id: Optional[int] = None) -> List[dict]:
        path = f"/appointments/doctor/{doctor_id}" if doctor_id else "/appointments/doctor"
        return (await self.request("GET", path))["data"]

    async def get_appointment(self, appointment_id: int) -> dict:
        return (await self.request("GET", f"/appointments/{appointment_id}"))["data"]

    async def cancel_appointment(self, appointment_id: int, reason: Optional[str] = None) -> dict:
        payload = {"reason": reason} if reason else None
        return (await self.request("PUT", f"/appointments/{appointment_id}/cancel", json=payload))["data"]

    async def update_appointment_status(self, appointment_id: int, status: str, notes: Optional[str] = None) -> dict:
        payload = {"status": status}
        if notes is not None:
            payload["notes"] = notes
        return (await self.request("PUT", f"/appointments/{appointment_id}/status", json=payload))["data"]

    async def add_prescription(self, appointment_id: int, medicines: List[dict], diagnosis: str, instructions: str = "") -> dict:
        body = await self.request("POST", f"/appointments/{appointment_id}/prescription", json={
            "medicines": medicines, "diagnosis": diagnosis, "instructions": instructions,
        })
        return body["data"]

    async def get_prescription(self, appointment_id: int) -> dict:
        return (await self.request("GET", f"/appointments/{appointment_id}/prescription"))["data"]

    # profile

    async def get_profile(self, user_id: int) -> dict:
        return (await self.request("GET", f"/profile/{user_id}"))["data"]

    async def update_profile(self, user_id: int, **fields) -> dict:
        return (await self.request("PUT", f"/profile/{user_id}", json=fields))["data"]

    async def add_medical_history(self, user_id: int, condition: str, notes: str = "") -> dict:
        body = await self.request("POST", f"/profile/{user_id}/medical-history", json={
            "condition": condition, "notes": notes,
        })
        return body["data"]

    # admin

    async def get_all_users(self) -> dict:
        return await self.request("GET", "/admin/users")

    async def get_all_patients(self) -> dict:
        return await self.request("GET", "/admin/patients")

    async def get_all_doctors(self) -> dict:
        return await self.request("GET", "/admin/doctors")

    async def delete_doctor(self, doctor_id: int) -> dict:
        return await self.request("DELETE", f"/admin/doctors/{doctor_id}")

    async def get_dashboard_stats(self) -> dict:
        patients = await self.get_all_patients()
        doctors = await self.get_all_doctors()
        appointments = await self.request("GET", "/appointments")
        return {
            "totalPatients": patients.get("count", 0),
            "totalDoctors": doctors.get("count", 0),
            "totalAppointments": appointments.get("count", 0),
        }
