import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User

RESERVIST_PASSWORD = 'Anchors-Aweigh-42'


@pytest.fixture
def api_client():
    """Anonymous client for the auth endpoints."""
    return APIClient()


@pytest.fixture
def reservist(db):
    """Active account with a known password."""
    return User.objects.create_user(
        email='reservist@example.com',
        password=RESERVIST_PASSWORD,
        display_name='Yeoman Reservist',
    )


@pytest.fixture
def deactivated_reservist(db):
    """Account switched off by staff."""
    return User.objects.create_user(
        email='discharged@example.com',
        password=RESERVIST_PASSWORD,
        is_active=False,
    )


@pytest.fixture
def reservist_client(reservist):
    """Client carrying the reservist's JWT access token."""
    client = APIClient()
    token = RefreshToken.for_user(reservist).access_token
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    return client
