"""
Registration and profile-update validation.

Checks run in a fixed order and stop at the first failure, which is
reported as a ValidationError naming the offending field:

    1. required fields present
    2. string fields are strings
    3. email/password carry no surrounding whitespace
    4. length limits
    5. email is a plausible address
"""

from __future__ import annotations

from typing import Any

from email_validator import EmailNotValidError, validate_email

from quire.errors import ValidationError

REQUIRED_FIELDS = ("email", "firstName", "lastName", "password")
STRING_FIELDS = ("email", "firstName", "lastName", "password")
TRIMMED_FIELDS = ("email", "password")
BOOLEAN_FIELDS = ("admin", "editor")

# Password max is in UTF-8 bytes; bcrypt only looks at the first 72
SIZED_FIELDS: dict[str, dict[str, int]] = {
    "password": {"min": 8, "max": 72},
    "firstName": {"min": 1},
    "lastName": {"min": 1},
}

# API field name -> model field name
FIELD_NAMES = {
    "email": "email",
    "firstName": "first_name",
    "lastName": "last_name",
    "password": "password",
    "admin": "admin",
    "editor": "editor",
}


def _check_types(body: dict[str, Any], fields: tuple[str, ...]) -> None:
    for field in fields:
        if field in body and not isinstance(body[field], str):
            raise ValidationError("Incorrect field type: expected string", location=field)


def _check_trimmed(body: dict[str, Any]) -> None:
    for field in TRIMMED_FIELDS:
        if field in body and body[field] != body[field].strip():
            raise ValidationError("Cannot start or end with whitespace", location=field)


def _measure(field: str, value: str, bound: str) -> int:
    # bcrypt truncates at 72 bytes, so the password ceiling is in bytes
    if field == "password" and bound == "max":
        return len(value.encode("utf-8"))
    return len(value.strip())


def _check_sizes(body: dict[str, Any]) -> None:
    too_small = next(
        (
            field for field, size in SIZED_FIELDS.items()
            if field in body and "min" in size and _measure(field, body[field], "min") < size["min"]
        ),
        None,
    )
    too_large = next(
        (
            field for field, size in SIZED_FIELDS.items()
            if field in body and "max" in size and _measure(field, body[field], "max") > size["max"]
        ),
        None,
    )

    if too_large:
        raise ValidationError(
            f"Can't be more than {SIZED_FIELDS[too_large]['max']} characters long",
            location=too_large,
        )
    if too_small:
        raise ValidationError(
            f"Must be at least {SIZED_FIELDS[too_small]['min']} characters long",
            location=too_small,
        )


def _check_email(body: dict[str, Any]) -> None:
    if "email" not in body:
        return
    try:
        validate_email(body["email"], check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Invalid email address", location="email")


def validate_registration(body: dict[str, Any] | None) -> dict[str, str]:
    """
    Validate a registration body.

    Returns:
        {email, first_name, last_name, password} with names trimmed.
        Role flags in the body are ignored; new users are authors.
    """
    body = body or {}

    missing = next((field for field in REQUIRED_FIELDS if field not in body), None)
    if missing:
        raise ValidationError("Missing field", location=missing)

    _check_types(body, STRING_FIELDS)
    _check_trimmed(body)
    _check_sizes(body)
    _check_email(body)

    return {
        "email": body["email"],
        "first_name": body["firstName"].strip(),
        "last_name": body["lastName"].strip(),
        "password": body["password"],
    }


def validate_update(body: dict[str, Any] | None) -> dict[str, Any]:
    """
    Validate a partial profile update.

    Only fields present are checked. Unknown fields are dropped.

    Returns:
        Model field names -> new values (the password still in plaintext).
    """
    body = {k: v for k, v in (body or {}).items() if k in FIELD_NAMES}

    _check_types(body, STRING_FIELDS)
    for field in BOOLEAN_FIELDS:
        if field in body and not isinstance(body[field], bool):
            raise ValidationError("Incorrect field type: expected boolean", location=field)

    _check_trimmed(body)
    _check_sizes(body)
    _check_email(body)

    updates = {FIELD_NAMES[k]: v for k, v in body.items()}
    for name in ("first_name", "last_name"):
        if name in updates:
            updates[name] = updates[name].strip()
    return updates
