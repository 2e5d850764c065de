"""Tests for the data models and pet loading."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from conftest import NOW, make_reminder

from petdash.adapters.base import FetchError
from petdash.adapters.pets import load_pets
from petdash.models import CalendarEventType, Pet


def test_reminder_dedup_key_uses_whole_seconds():
    reminder = make_reminder("Vaccine", NOW + timedelta(milliseconds=999))

    assert reminder.dedup_key == ("Vaccine", int(NOW.timestamp()))


def test_models_are_immutable():
    reminder = make_reminder("Vaccine", NOW)

    with pytest.raises(ValidationError):
        reminder.title = "Other"


def test_pet_derived_fields(max_pet, luna_pet):
    assert max_pet.meds_count == 1
    assert max_pet.weight_text == "12.5 kg"
    assert luna_pet.meds_count == 0
    assert luna_pet.weight_text == "Weight n/a"


def test_event_type_presentation():
    assert CalendarEventType.VACCINATION.icon == "syringe.fill"
    assert CalendarEventType.APPOINTMENT.tint == "canyon"
    assert CalendarEventType.MEDICATION.display_name == "Medication"


def test_load_pets_from_yaml(tmp_path):
    path = tmp_path / "pets.yaml"
    path.write_text(
        """pets:
  - id: max
    name: Max
    species: Dog
    weight: 12.5
    medical_history:
      vaccinations: [Rabies]
      current_medications:
        - name: Apoquel
          dosage: 16mg
  - id: luna
    name: Luna
""",
        encoding="utf-8",
    )

    pets = load_pets(path)

    assert [p.id for p in pets] == ["max", "luna"]
    assert pets[0].meds_count == 1
    assert isinstance(pets[1], Pet)


def test_load_pets_missing_file_is_empty(tmp_path):
    assert load_pets(tmp_path / "missing.yaml") == []


def test_load_pets_invalid_yaml_raises(tmp_path):
    path = tmp_path / "pets.yaml"
    path.write_text("pets: [", encoding="utf-8")

    with pytest.raises(FetchError):
        load_pets(path)
