"""Identity service - registration and self-service profile updates.

Accounts are Django auth users. The username is the lower-cased e-mail
address, so one address maps to one account. New accounts are always
participants; organizers are granted through the admin (staff flag or the
organizers group).
"""

import structlog
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction

from elections.domain import Account, Caller, Role
from elections.domain.errors import ForbiddenError, StoreUnavailableError, ValidationFailedError
from elections.domain.validation import EntryPoint, IdentityRules, validate_identity_payload
from elections.services.access import require_authenticated

log = structlog.get_logger(__name__)

ORGANIZER_GROUP = "organizers"


def role_of(user) -> Role:
    if user.is_staff or user.groups.filter(name=ORGANIZER_GROUP).exists():
        return Role.ORGANIZER
    return Role.PARTICIPANT


def to_account(user) -> Account:
    return Account(id=str(user.pk), name=user.first_name, email=user.email, role=role_of(user))


class IdentityService:
    """Service for creating and updating participant accounts."""

    def __init__(self, rules: IdentityRules = IdentityRules()) -> None:
        self._rules = rules
        self._users = get_user_model()

    def _check(self, name, email, password, entry_point: EntryPoint) -> None:
        violations = validate_identity_payload(
            name, email, password, entry_point=entry_point, rules=self._rules
        )
        if violations:
            raise ValidationFailedError(violations)

    def _email_taken(self, username: str, exclude_pk=None) -> bool:
        users = self._users.objects.filter(username=username)
        if exclude_pk is not None:
            users = users.exclude(pk=exclude_pk)
        return users.exists()

    def register(self, name: str, email: str, password: str) -> Account:
        """Create a participant account.

        Raises:
            ValidationFailedError: If the payload breaks a rule or the e-mail
                address is already registered.
        """
        self._check(name, email, password, EntryPoint.REGISTER)
        username = email.strip().lower()

        try:
            if self._email_taken(username):
                raise ValidationFailedError(["User already exists"])
            with transaction.atomic():
                user = self._users.objects.create_user(
                    username=username,
                    email=email.strip(),
                    password=password,
                    first_name=name.strip(),
                )
        except IntegrityError as exc:
            # Another registration for the same address committed first.
            raise ValidationFailedError(["User already exists"]) from exc
        except DatabaseError as exc:
            log.error("store_unavailable", operation="register", error=str(exc), exc_info=True)
            raise StoreUnavailableError() from exc

        log.info("account_registered", account_id=str(user.pk))
        return to_account(user)

    def update_profile(
        self, name: str, email: str, password: str, *, caller: Caller | None
    ) -> Account:
        """Replace the caller's name, e-mail address and password.

        The self-service password threshold applies.

        Raises:
            ForbiddenError: If there is no authenticated caller.
            ValidationFailedError: If the payload breaks a rule or the e-mail
                address belongs to another account.
        """
        caller = require_authenticated(caller)
        self._check(name, email, password, EntryPoint.SELF_SERVICE)
        username = email.strip().lower()

        try:
            user = self._users.objects.filter(pk=caller.id).first()
            if user is None:
                raise ForbiddenError("Authentication required")
            if self._email_taken(username, exclude_pk=user.pk):
                raise ValidationFailedError(["User already exists"])
            user.username = username
            user.email = email.strip()
            user.first_name = name.strip()
            user.set_password(password)
            with transaction.atomic():
                user.save()
        except IntegrityError as exc:
            raise ValidationFailedError(["User already exists"]) from exc
        except DatabaseError as exc:
            log.error("store_unavailable", operation="update_profile", error=str(exc), exc_info=True)
            raise StoreUnavailableError() from exc

        log.info("profile_updated", account_id=str(user.pk))
        return to_account(user)
