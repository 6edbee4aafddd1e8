"""Shared record builders for the CareBook test suites."""

import pytest

from carebook.domain.records import Patient, Specialist


def build_patient(**overrides) -> Patient:
    values = {
        "name": "Amy Bee",
        "phone": "85355255",
        "email": "amy@example.com",
        "tags": frozenset({"friends"}),
        "medical_history": "Asthma",
        "age": 30,
    }
    values.update(overrides)
    return Patient(**values)


def build_specialist(**overrides) -> Specialist:
    values = {
        "name": "Carl Kurz",
        "phone": "95352563",
        "email": "carl@example.com",
        "tags": frozenset(),
        "location": "Wall Street",
        "specialty": "Physiotherapist",
    }
    values.update(overrides)
    return Specialist(**values)


@pytest.fixture
def make_patient():
    """Factory for valid patients; keyword arguments override fields."""
    return build_patient


@pytest.fixture
def make_specialist():
    """Factory for valid specialists; keyword arguments override fields."""
    return build_specialist
