from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from pawfessional.application.exceptions import FormError
from pawfessional.application.ports.appointment_api import AppointmentApiPort
from pawfessional.application.utils.form_rules import blank_to_none
from pawfessional.domain.entities.pet import Pet

GENDERS = ("Male", "Female")
REQUIRED_FIELDS = ("pet_name", "species", "breed", "gender")


@dataclass(frozen=True)
class PetForm:
    pet_name: str = ""
    species: str = ""
    breed: str = ""
    gender: str = ""
    age: str = ""
    weight: str = ""
    notes: str = ""

    @staticmethod
    def from_pet(pet: Pet) -> "PetForm":
        return PetForm(
            pet_name=pet.name,
            species=pet.species or "",
            breed=pet.breed or "",
            gender=pet.gender or "",
            age=pet.age or "",
            weight=pet.weight or "",
            notes=pet.notes or "",
        )


def build_pet_payload(form: PetForm, owner_id: int | None) -> dict[str, Any]:
    missing = [name for name in REQUIRED_FIELDS if not getattr(form, name).strip()]
    if missing:
        raise FormError({name: "Please fill in Pet Name, Species, Breed, and Gender." for name in missing})
    payload: dict[str, Any] = {f.name: getattr(form, f.name) for f in fields(form)}
    payload["user_id"] = owner_id
    payload["age"] = blank_to_none(form.age)
    payload["weight"] = blank_to_none(form.weight)
    return payload


class PetFormUseCase:
    def __init__(self, api: AppointmentApiPort, owner_id: int | None) -> None:
        self._api = api
        self._owner_id = owner_id

    async def add(self, form: PetForm) -> None:
        await self._api.add_pet(build_pet_payload(form, self._owner_id))

    async def update(self, pet_id: int, form: PetForm) -> None:
        await self._api.update_pet(pet_id, build_pet_payload(form, self._owner_id))
