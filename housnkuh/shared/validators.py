"""Shared validation utilities"""

import re
from typing import Optional

# Same rule the registration form enforces on the client
PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = "@$!%*?&"
PASSWORD_REGEX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$")

PASSWORD_ERROR_MESSAGES = {
    "too_short": f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
    "missing_uppercase": "Password needs at least one uppercase letter",
    "missing_lowercase": "Password needs at least one lowercase letter",
    "missing_number": "Password needs at least one digit",
    "missing_special_char": f"Password needs at least one special character ({PASSWORD_SPECIAL_CHARS})",
    "invalid_chars": f"Password may only contain letters, digits and {PASSWORD_SPECIAL_CHARS}",
}


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def password_problems(password: str) -> list[str]:
    """Return every rule the password breaks (empty list when valid)"""
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(PASSWORD_ERROR_MESSAGES["too_short"])
    if not re.search(r"[A-Z]", password):
        problems.append(PASSWORD_ERROR_MESSAGES["missing_uppercase"])
    if not re.search(r"[a-z]", password):
        problems.append(PASSWORD_ERROR_MESSAGES["missing_lowercase"])
    if not re.search(r"\d", password):
        problems.append(PASSWORD_ERROR_MESSAGES["missing_number"])
    if not any(char in PASSWORD_SPECIAL_CHARS for char in password):
        problems.append(PASSWORD_ERROR_MESSAGES["missing_special_char"])
    if not problems and not PASSWORD_REGEX.match(password):
        problems.append(PASSWORD_ERROR_MESSAGES["invalid_chars"])
    return problems


def validate_password(password: Optional[str]) -> str:
    """
    Validate password against the shared password policy.

    Raises:
        ValueError: With all violated rules joined into one message
    """
    problems = password_problems(password or "")
    if problems:
        raise ValueError("; ".join(problems))
    return password


def validate_postal_code(postal_code: Optional[str]) -> str:
    """Validate a German postal code (PLZ, five digits)"""
    value = (postal_code or "").strip()
    if not re.fullmatch(r"\d{5}", value):
        raise ValueError("Postal code must have exactly 5 digits")
    return value


def validate_required_text(value: Optional[str], field_name: str, max_length: int = 200) -> str:
    """Require a non-blank string no longer than max_length"""
    text = (value or "").strip()
    if not text:
        raise ValueError(f"{field_name} is required")
    if len(text) > max_length:
        raise ValueError(f"{field_name} exceeds maximum length of {max_length} characters")
    return text
