from __future__ import annotations

import asyncio
import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from pawfessional.core.config import settings
from pawfessional.domain.entities.appointment import INACTIVE_STATUSES, AppointmentStatus

logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@pawfessional.com"
DEMO_PASSWORD = "Passw0rd!"


class LoginSchema(BaseModel):
    email: str
    password: str


class RegisterSchema(BaseModel):
    fullname: str
    email: str
    password: str
    phone: str = ""
    address: str = ""
    role: str = "user"


class EmailSchema(BaseModel):
    email: str


class VerifyOtpSchema(BaseModel):
    email: str
    otp: str


class ResetPasswordSchema(BaseModel):
    email: str
    password: str


class ChangePasswordSchema(BaseModel):
    user_id: int
    currentPassword: str
    newPassword: str


class UserIdSchema(BaseModel):
    user_id: int


class PetSchema(BaseModel):
    user_id: int | None = None
    pet_name: str
    species: str
    breed: str
    gender: str
    age: str | None = None
    weight: str | None = None
    notes: str | None = None


class AppointmentSchema(BaseModel):
    owner_id: int
    pet_ids: list[int] = Field(min_length=1)
    services: list[str] = Field(min_length=1)
    notes: str = ""
    appointment_date: str
    appointment_time: str


@dataclass
class MockClinicBackend:
    """In-memory stand-in for the clinic server's data."""

    users: dict[int, dict[str, Any]] = field(default_factory=dict)
    pets: dict[int, dict[str, Any]] = field(default_factory=dict)
    appointments: dict[int, dict[str, Any]] = field(default_factory=dict)
    events: dict[int, dict[str, Any]] = field(default_factory=dict)
    otps: dict[str, str] = field(default_factory=dict)
    verified_emails: set[str] = field(default_factory=set)
    deletion_requests: set[int] = field(default_factory=set)
    subscribers: list[asyncio.Queue] = field(default_factory=list)

    def next_id(self, table: dict[int, Any]) -> int:
        return max(table, default=0) + 1

    def find_user(self, email: str) -> dict[str, Any] | None:
        for user in self.users.values():
            if user["email"].lower() == email.strip().lower():
                return user
        return None

    def public_user(self, user: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in user.items() if k != "password"}

    def slot_taken(self, appointment_date: str, appointment_time: str) -> bool:
        return any(
            a["appointment_date"] == appointment_date
            and a["appointment_time"] == appointment_time
            and a["status"] not in INACTIVE_STATUSES
            for a in self.appointments.values()
        )

    def broadcast(self, event_name: str, data: dict[str, Any]) -> None:
        for queue in list(self.subscribers):
            queue.put_nowait((event_name, data))

    @classmethod
    def with_demo_data(cls) -> "MockClinicBackend":
        backend = cls()
        backend.users[1] = {
            "id": 1,
            "email": DEMO_EMAIL,
            "password": DEMO_PASSWORD,
            "fullname": "Demo Owner",
            "phone": "09170000000",
            "role": "user",
        }
        backend.pets[1] = {
            "pet_id": 1,
            "user_id": 1,
            "pet_name": "Mochi",
            "species": "Dog",
            "breed": "Shiba Inu",
            "gender": "Female",
            "age": "3",
            "weight": "9.5",
            "notes": None,
            "pet_image_url": None,
        }
        backend.pets[2] = {
            "pet_id": 2,
            "user_id": 1,
            "pet_name": "Tofu",
            "species": "Cat",
            "breed": "Persian",
            "gender": "Male",
            "age": None,
            "weight": None,
            "notes": "Nervous with strangers",
            "pet_image_url": None,
        }
        soon = date.today() + timedelta(days=7)
        backend.events[1] = {
            "event_id": 1,
            "title": "Free Anti-Rabies Vaccination Drive",
            "event_date": soon.isoformat(),
            "event_time": "09:00",
            "description": "Open to all registered pets.",
        }
        return backend


def _message(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def build_router(backend: MockClinicBackend) -> APIRouter:
    router = APIRouter(prefix="/api/mobile")

    @router.post("/login")
    def login(req: LoginSchema):
        user = backend.find_user(req.email)
        if user is None or user["password"] != req.password:
            return JSONResponse(status_code=401, content={"success": False, "message": "Invalid credentials"})
        return {"success": True, "user": backend.public_user(user)}

    @router.post("/register")
    def register(req: RegisterSchema):
        if backend.find_user(req.email) is not None:
            return JSONResponse(status_code=409, content={"success": False, "message": "Email already registered."})
        user_id = backend.next_id(backend.users)
        backend.users[user_id] = {"id": user_id, **req.model_dump(exclude={"address"})}
        return JSONResponse(status_code=201, content={"success": True, "message": "Account created."})

    @router.post("/forgot-password/request-otp")
    def request_otp(req: EmailSchema):
        if backend.find_user(req.email) is None:
            return _message(404, "No account found for that email.")
        backend.otps[req.email] = f"{secrets.randbelow(10**6):06d}"
        logger.info("Mock OTP issued", extra={"reason": req.email})
        return {"message": "A 6-digit PIN has been sent to your email."}

    @router.post("/forgot-password/verify-otp")
    def verify_otp(req: VerifyOtpSchema):
        if backend.otps.get(req.email) != req.otp:
            return _message(400, "Invalid PIN. Please try again.")
        backend.verified_emails.add(req.email)
        return {"message": "PIN verified."}

    @router.post("/forgot-password/reset-password")
    def reset_password(req: ResetPasswordSchema):
        user = backend.find_user(req.email)
        if user is None or req.email not in backend.verified_emails:
            return _message(403, "PIN verification required.")
        user["password"] = req.password
        backend.verified_emails.discard(req.email)
        backend.otps.pop(req.email, None)
        return {"message": "Password reset."}

    @router.post("/change-password")
    def change_password(req: ChangePasswordSchema):
        user = backend.users.get(req.user_id)
        if user is None or user["password"] != req.currentPassword:
            return _message(400, "Current password is incorrect.")
        user["password"] = req.newPassword
        return {"message": "Password updated."}

    @router.post("/account/delete")
    def delete_account(req: UserIdSchema):
        if req.user_id not in backend.users:
            return _message(404, "User not found.")
        backend.deletion_requests.add(req.user_id)
        return {"message": "Account scheduled for deletion in 30 days."}

    @router.get("/pets/{owner_id}")
    def list_pets(owner_id: int):
        return [p for p in backend.pets.values() if p["user_id"] == owner_id]

    @router.post("/pets/add")
    def add_pet(req: PetSchema):
        if req.user_id not in backend.users:
            return _message(400, "Unknown owner.")
        pet_id = backend.next_id(backend.pets)
        backend.pets[pet_id] = {"pet_id": pet_id, "pet_image_url": None, **req.model_dump()}
        return JSONResponse(status_code=201, content={"message": "Pet registered.", "pet_id": pet_id})

    @router.patch("/pets/{pet_id}")
    def update_pet(pet_id: int, req: PetSchema):
        pet = backend.pets.get(pet_id)
        if pet is None:
            return _message(404, "Pet not found.")
        pet.update(req.model_dump(exclude={"user_id"}))
        return {"message": "Pet updated."}

    @router.get("/appointments/{owner_id}")
    def list_appointments(owner_id: int):
        return [a for a in backend.appointments.values() if a["user_id"] == owner_id]

    @router.post("/appointment")
    async def create_appointment(req: AppointmentSchema):
        owned = {p["pet_id"] for p in backend.pets.values() if p["user_id"] == req.owner_id}
        if not set(req.pet_ids) <= owned:
            return _message(400, "One or more pets do not belong to this owner.")
        if backend.slot_taken(req.appointment_date, req.appointment_time):
            return _message(400, "Slot unavailable")
        appointment_id = backend.next_id(backend.appointments)
        backend.appointments[appointment_id] = {
            "appointment_id": appointment_id,
            "user_id": req.owner_id,
            "pet_ids": req.pet_ids,
            "pet_names": [backend.pets[p]["pet_name"] for p in req.pet_ids],
            "services": req.services,
            "notes": req.notes,
            "appointment_date": req.appointment_date,
            "appointment_time": req.appointment_time,
            "status": AppointmentStatus.pending.value,
        }
        backend.broadcast(settings.REFRESH_EVENT_NAME, {"user_id": req.owner_id, "appointment_id": appointment_id})
        return JSONResponse(status_code=201, content={"message": "Appointment booked.", "appointment_id": appointment_id})

    @router.patch("/appointment/{appointment_id}/cancel")
    async def cancel_appointment(appointment_id: int):
        appointment = backend.appointments.get(appointment_id)
        if appointment is None:
            return _message(404, "Appointment not found.")
        if appointment["status"] not in (AppointmentStatus.pending.value, AppointmentStatus.approved.value):
            return _message(409, f"Cannot cancel an appointment that is {appointment['status']}.")
        appointment["status"] = AppointmentStatus.cancelled.value
        backend.broadcast(
            settings.REFRESH_EVENT_NAME, {"user_id": appointment["user_id"], "appointment_id": appointment_id}
        )
        return {"message": "Appointment cancelled."}

    @router.get("/events")
    async def events():
        queue: asyncio.Queue = asyncio.Queue()
        backend.subscribers.append(queue)

        async def stream():
            try:
                yield ": connected\n\n"
                while True:
                    event_name, data = await queue.get()
                    yield f"event: {event_name}\ndata: {json.dumps(data)}\n\n"
            finally:
                backend.subscribers.remove(queue)

        return StreamingResponse(stream(), media_type="text/event-stream")

    @router.get("/public-events")
    def list_public_events():
        return list(backend.events.values())

    return router


def create_mock_api(backend: MockClinicBackend | None = None) -> FastAPI:
    app = FastAPI(title="Pawfessional Mock Clinic API", version="1.0.0")
    app.state.backend = backend or MockClinicBackend.with_demo_data()
    app.include_router(build_router(app.state.backend), tags=["mobile"])

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
