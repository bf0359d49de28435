"""
Account services for the logbook's identity boundary.

Only email/password registration and login live here; every logbook
operation receives the resulting ``User`` explicitly.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone

User = get_user_model()
logger = logging.getLogger(__name__)


class AccountsServiceError(Exception):
    """Base exception for account services."""


class UserRegistrationError(AccountsServiceError):
    """Email already registered."""


class InvalidCredentialsError(AccountsServiceError):
    """Unknown email or wrong password."""


class InactiveAccountError(AccountsServiceError):
    """Account exists but has been deactivated by staff."""


def _normalize_email(email: str) -> str:
    return User.objects.normalize_email(email.strip())


@transaction.atomic
def register_user(*, email: str, password: str, display_name: str = "") -> User:
    """
    Create a reservist account.

    Raises:
        UserRegistrationError: If the email is already registered
    """
    email = _normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("An account with this email already exists")

    try:
        user = User.objects.create_user(
            email=email,
            password=password,
            display_name=display_name.strip(),
        )
    except IntegrityError:
        raise UserRegistrationError("An account with this email already exists")

    logger.info("Registered user %s", user.id)
    return user


@transaction.atomic
def authenticate_user(*, email: str, password: str) -> User:
    """
    Check an email/password pair and stamp ``last_login``.

    The password is checked before the active flag, so a deactivated
    account is only revealed to someone who knows its password.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password
        InactiveAccountError: Correct password on a deactivated account
    """
    user = (
        User.objects
        .select_for_update()
        .filter(email__iexact=_normalize_email(email))
        .first()
    )
    if user is None or not user.check_password(password):
        logger.info("Failed login for %s", email)
        raise InvalidCredentialsError("Invalid email or password")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])
    return user
