"""Tests for the shared capacity ledger in django_fest.registration.services.capacity."""

from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from django_fest.events.models import Event, Organizer
from django_fest.exceptions import CapacityError, NotFoundError
from django_fest.registration.models import Registration
from django_fest.registration.services.capacity import (
    active_registration_count,
    check_capacity,
    ensure_capacity,
    get_remaining,
    lock_event,
    resync,
)

User = get_user_model()


def _register(event, n, *, status=Registration.Status.REGISTERED):
    for _ in range(n):
        user = User.objects.create_user(username=f"cap-{User.objects.count()}")
        Registration.objects.create(event=event, user=user, status=status)


@pytest.fixture
def organizer(db):
    account = User.objects.create_user(username="club", email="club@example.com")
    return Organizer.objects.create(account=account, name="Club", contact_email="club@example.com")


@pytest.fixture
def event(organizer):
    return Event.objects.create(
        organizer=organizer,
        name="Quiz",
        status=Event.Status.PUBLISHED,
        registration_deadline=timezone.now() + timedelta(days=3),
        registration_limit=5,
    )


@pytest.mark.django_db
class TestActiveRegistrationCount:
    def test_ignores_cancelled(self, event):
        _register(event, 2)
        _register(event, 1, status=Registration.Status.CANCELLED)
        _register(event, 1, status=Registration.Status.ATTENDED)

        assert active_registration_count(event) == 3


@pytest.mark.django_db
class TestCheckCapacity:
    def test_unlimited_event_always_fits(self, event):
        event.registration_limit = 0
        event.registration_count = 10_000

        assert check_capacity(event, 50)

    def test_uses_cached_counter_by_default(self, event):
        event.registration_count = 4

        assert check_capacity(event, 1)
        assert not check_capacity(event, 2)

    def test_recount_ignores_stale_counter(self, event):
        _register(event, 4)
        event.registration_count = 0

        assert check_capacity(event, 5)
        assert not check_capacity(event, 2, recount=True)
        assert check_capacity(event, 1, recount=True)

    def test_ensure_capacity_raises(self, event):
        event.registration_count = 5

        with pytest.raises(CapacityError, match="Event is fully booked"):
            ensure_capacity(event)


@pytest.mark.django_db
class TestGetRemaining:
    def test_unlimited_returns_none(self, event):
        event.registration_limit = 0

        assert get_remaining(event) is None

    def test_counts_down_and_never_negative(self, event):
        _register(event, 3)
        assert get_remaining(event) == 2

        _register(event, 4)
        assert get_remaining(event) == 0


@pytest.mark.django_db
class TestResync:
    def test_restores_counter(self, event):
        _register(event, 3)
        _register(event, 1, status=Registration.Status.CANCELLED)
        Event.objects.filter(pk=event.pk).update(registration_count=17)
        event.refresh_from_db()

        assert resync(event) == 3
        assert event.registration_count == 3
        event.refresh_from_db()
        assert event.registration_count == 3


@pytest.mark.django_db
class TestLockEvent:
    def test_returns_event(self, event):
        with transaction.atomic():
            assert lock_event(event.pk) == event

    def test_missing_event(self, db):
        with transaction.atomic(), pytest.raises(NotFoundError, match="Event not found"):
            lock_event(123_456)


@pytest.mark.django_db(transaction=True)
def test_lock_event_requires_transaction():
    with pytest.raises(RuntimeError, match="transaction.atomic"):
        lock_event(1)
