from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pawfessional.domain.entities.appointment import Appointment
from pawfessional.domain.entities.pet import Pet
from pawfessional.domain.entities.public_event import PublicEvent
from pawfessional.domain.entities.user import User


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class PetRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pet_id: int
    pet_name: str
    species: str | None = None
    breed: str | None = None
    pet_image_url: str | None = None
    gender: str | None = None
    age: str | None = None
    weight: str | None = None
    notes: str | None = None

    @field_validator("age", "weight", mode="before")
    @classmethod
    def _stringify(cls, value: object) -> str | None:
        return _optional_str(value)

    def to_entity(self) -> Pet:
        return Pet(
            id=self.pet_id,
            name=self.pet_name,
            species=self.species,
            breed=self.breed,
            image_url=self.pet_image_url,
            gender=self.gender,
            age=self.age,
            weight=self.weight,
            notes=self.notes,
        )


class AppointmentRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    appointment_id: int
    owner_id: int | None = Field(default=None, validation_alias=AliasChoices("owner_id", "user_id"))
    status: str
    appointment_date: str
    appointment_time: str | None = None
    pet_ids: list[int] = Field(default_factory=list)
    pet_names: list[str] = Field(default_factory=list)
    services: list[str] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("pet_names", "services", mode="before")
    @classmethod
    def _split_csv(cls, value: object) -> object:
        # Some endpoints flatten lists into "A, B".
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if value is None:
            return []
        return value

    def to_entity(self) -> Appointment:
        return Appointment(
            id=self.appointment_id,
            owner_id=self.owner_id,
            status=self.status,
            appointment_date=self.appointment_date,
            appointment_time=self.appointment_time,
            pet_ids=tuple(self.pet_ids),
            pet_names=tuple(self.pet_names),
            services=tuple(self.services),
            notes=self.notes,
        )


class PublicEventRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event_id: int
    title: str
    event_date: str
    event_time: str | None = None
    description: str | None = None

    def to_entity(self) -> PublicEvent:
        return PublicEvent(
            id=self.event_id,
            title=self.title,
            event_date=self.event_date,
            event_time=self.event_time,
            description=self.description,
        )


class UserRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    email: str
    fullname: str | None = None
    phone: str | None = None
    role: str = "user"

    def to_entity(self) -> User:
        return User(id=self.id, email=self.email, fullname=self.fullname, phone=self.phone, role=self.role)
