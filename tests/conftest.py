import pytest

from front_tracker.models import Member, System


@pytest.fixture
def system() -> System:
    return System(id=1, hid="abcde", name="Stars", zone="UTC")


@pytest.fixture
def alice(system: System) -> Member:
    return Member(id=10, system_id=system.id, name="Alice")


@pytest.fixture
def bob(system: System) -> Member:
    return Member(id=11, system_id=system.id, name="Bob")
