import re

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2


class ValidationError(ValueError):
    pass


def normalize_email(email: str | None) -> str:
    value = (email or "").strip().lower()
    if not value or not EMAIL_PATTERN.match(value):
        raise ValidationError("Please enter a valid email address")
    return value


def validate_password(password: str | None) -> str:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("Password must be at least 6 characters long")
    return password


def normalize_name(name: str | None) -> str:
    value = (name or "").strip()
    if len(value) < MIN_NAME_LENGTH:
        raise ValidationError("Name must be at least 2 characters long")
    return value


def normalize_phone(phone: str | None) -> str | None:
    value = (phone or "").strip()
    if not value:
        return None
    if not PHONE_PATTERN.match(value):
        raise ValidationError("Phone number must be exactly 10 digits")
    return value
