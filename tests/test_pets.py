"""
Tests for the add/edit pet forms.
"""

from __future__ import annotations

import pytest

from pawfessional.application.exceptions import FormError
from pawfessional.application.use_cases.pets import PetForm, PetFormUseCase, build_pet_payload
from pawfessional.domain.entities.pet import Pet


def test_payload_blanks_optional_numbers():
    form = PetForm(pet_name="Mochi", species="Dog", breed="Shiba Inu", gender="Female", age=" ", weight="9.5")

    payload = build_pet_payload(form, owner_id=1)

    assert payload == {
        "pet_name": "Mochi",
        "species": "Dog",
        "breed": "Shiba Inu",
        "gender": "Female",
        "age": None,
        "weight": "9.5",
        "notes": "",
        "user_id": 1,
    }


def test_missing_required_fields_are_reported():
    with pytest.raises(FormError) as excinfo:
        build_pet_payload(PetForm(pet_name="Mochi", species="Dog"), owner_id=1)

    assert set(excinfo.value.errors) == {"breed", "gender"}


def test_edit_form_prefills_from_pet():
    pet = Pet(id=7, name="Tofu", species="Cat", breed="Persian", gender="Male", age="2")

    form = PetForm.from_pet(pet)

    assert form.pet_name == "Tofu"
    assert form.age == "2"
    assert form.weight == ""


async def test_add_and_update_go_to_api(fake_api):
    use_case = PetFormUseCase(fake_api, owner_id=1)
    form = PetForm(pet_name="Bao", species="Dog", breed="Aspin", gender="Male")

    await use_case.add(form)
    await use_case.update(9, form)

    assert fake_api.call_names() == ["add_pet", "update_pet"]
    assert fake_api.calls[1][1][0] == 9
    assert fake_api.calls[0][1]["user_id"] == 1
