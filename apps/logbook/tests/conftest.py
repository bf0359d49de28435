import pytest
from datetime import date, datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.logbook.models import LogEntry


BASE_START = datetime(2026, 3, 2, 8, 0, tzinfo=dt_timezone.utc)


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def sailor(db):
    """Create and return the reservist whose hours are tracked."""
    return User.objects.create_user(
        email='sailor@example.com',
        password='TestPass123!',
        display_name='Petty Officer',
    )


@pytest.fixture
def other_sailor(db):
    """Create and return a second, unrelated reservist."""
    return User.objects.create_user(
        email='shipmate@example.com',
        password='TestPass123!',
        display_name='Shipmate',
    )


@pytest.fixture
def sailor_client(sailor):
    """Return API client authenticated as sailor."""
    return _client_for(sailor)


@pytest.fixture
def other_client(other_sailor):
    """Return API client authenticated as other_sailor."""
    return _client_for(other_sailor)


@pytest.fixture
def make_log(db):
    """
    Factory for log entries.

    Each call without an explicit ``start`` places the entry one day after
    the previous one, so creation order matches ``start`` order.
    """
    counter = {'day': 0}

    def _make(user, hours, start=None, end=None, note='', bundle=None):
        if start is None:
            start = BASE_START + timedelta(days=counter['day'])
            counter['day'] += 1
        if end is None:
            end = start + timedelta(hours=float(hours))
        return LogEntry.objects.create(
            user=user,
            hours=Decimal(str(hours)),
            start=start,
            end=end,
            note=note,
            bundle=bundle,
        )

    return _make


@pytest.fixture
def filed_date():
    """Filing date used for submitted RMPs."""
    return date(2026, 3, 20)
