"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from django.contrib.auth.models import Group, User
from rest_framework.test import APIClient

from ticketing import models
from ticketing.domain import Principal, Role
from ticketing.stores.memory_store import InMemoryTicketingStore

ORGANIZER_ID = 1
OTHER_ORGANIZER_ID = 2
ADMIN_ID = 99


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore(lock_timeout_ms=2000)


@pytest.fixture
def event(store):
    return store.add_event(
        title="Spring Concert",
        starts_at=datetime(2030, 4, 1, 20, 0, tzinfo=timezone.utc),
        venue="Main Hall",
        organizer_id=ORGANIZER_ID,
    )


@pytest.fixture
def ticket_type(store, event):
    return store.add_ticket_type(event.id, "General", Decimal("25.00"), stock=5)


@pytest.fixture
def organizer() -> Principal:
    return Principal(id=ORGANIZER_ID, role=Role.ORGANIZER)


@pytest.fixture
def other_organizer() -> Principal:
    return Principal(id=OTHER_ORGANIZER_ID, role=Role.ORGANIZER)


@pytest.fixture
def admin() -> Principal:
    return Principal(id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def organizer_user(db) -> User:
    user = User.objects.create_user("organizer", password="secret")
    group, _ = Group.objects.get_or_create(name="organizers")
    user.groups.add(group)
    return user


@pytest.fixture
def other_organizer_user(db) -> User:
    user = User.objects.create_user("rival", password="secret")
    group, _ = Group.objects.get_or_create(name="organizers")
    user.groups.add(group)
    return user


@pytest.fixture
def admin_user(db) -> User:
    return User.objects.create_superuser("admin", password="secret")


@pytest.fixture
def db_event(organizer_user) -> models.Event:
    return models.Event.objects.create(
        title="Jazz Night",
        starts_at=datetime(2030, 6, 1, 21, 0, tzinfo=timezone.utc),
        venue="Blue Room",
        organizer=organizer_user,
    )


@pytest.fixture
def db_ticket_type(db_event) -> models.TicketType:
    return models.TicketType.objects.create(
        event=db_event, name="VIP", price=Decimal("80.00"), stock=3
    )
