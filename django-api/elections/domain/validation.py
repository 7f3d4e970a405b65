"""Pure validation of event and identity payloads.

Every rule is evaluated independently and all violations are collected.
An empty list means the payload is valid.

Identity payloads are checked by the registration and self-service
profile endpoints (elections.services.identity_service).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from django.core.exceptions import ValidationError
from django.core.validators import validate_email


@dataclass(frozen=True)
class EventRules:
    """Thresholds for event payloads."""

    title_min_length: int = 3
    description_min_length: int = 10
    min_options: int = 2
    start_grace: timedelta = timedelta(seconds=60)


class EntryPoint(Enum):
    """Where an identity payload is submitted."""

    REGISTER = "register"
    SELF_SERVICE = "self_service"


@dataclass(frozen=True)
class IdentityRules:
    """Thresholds for identity payloads."""

    name_min_length: int = 2
    min_password_len_register: int = 6
    min_password_len_self_service: int = 8

    def min_password_length(self, entry_point: EntryPoint) -> int:
        if entry_point is EntryPoint.SELF_SERVICE:
            return self.min_password_len_self_service
        return self.min_password_len_register


def _stripped_length(value: object) -> int:
    if not isinstance(value, str):
        return 0
    return len(value.strip())


def _is_valid_email(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value)
    except ValidationError:
        return False
    return True


def validate_options(options: object, rules: EventRules) -> list[str]:
    if isinstance(options, str) or not isinstance(options, Sequence):
        return [f"Event must have at least {rules.min_options} options"]

    violations = []
    if len(options) < rules.min_options:
        violations.append(f"Event must have at least {rules.min_options} options")

    names = [name.strip() for name in options if isinstance(name, str)]
    if len(names) != len(options) or not all(names):
        violations.append("Option names cannot be empty")
    elif len({name.casefold() for name in names}) != len(names):
        violations.append("Option names must be unique")
    return violations


def validate_event_payload(
    title: object,
    description: object,
    options: object,
    start_at: datetime | None,
    end_at: datetime | None,
    *,
    now: datetime,
    rules: EventRules = EventRules(),
    check_start: bool = True,
) -> list[str]:
    """Return the violations found in an event payload.

    ``check_start`` disables the start-in-the-past rule, used when a patch
    leaves an existing start time untouched.
    """
    violations = []

    if _stripped_length(title) < rules.title_min_length:
        violations.append(f"Title must be at least {rules.title_min_length} characters long")

    if _stripped_length(description) < rules.description_min_length:
        violations.append(
            f"Description must be at least {rules.description_min_length} characters long"
        )

    violations.extend(validate_options(options, rules))

    if check_start and start_at is not None and start_at < now - rules.start_grace:
        violations.append("Start date cannot be in the past")

    if start_at is not None and end_at is not None and end_at <= start_at:
        violations.append("End date must be after start date")

    return violations


def validate_identity_payload(
    name: object,
    email: object,
    password: object,
    *,
    entry_point: EntryPoint = EntryPoint.REGISTER,
    rules: IdentityRules = IdentityRules(),
) -> list[str]:
    """Return the violations found in a registration or self-service payload."""
    violations = []

    if _stripped_length(name) < rules.name_min_length:
        violations.append(f"Name must be at least {rules.name_min_length} characters long")

    if not _is_valid_email(email):
        violations.append("Please provide a valid email address")

    min_length = rules.min_password_length(entry_point)
    if not isinstance(password, str) or len(password) < min_length:
        violations.append(f"Password must be at least {min_length} characters long")

    return violations
