"""Shared validation utilities"""

import re
import uuid
from typing import Optional


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError):
        return False


def normalize_e164(phone: Optional[str]) -> Optional[str]:
    """
    Normalize an international phone number to E.164 format.

    Args:
        phone: Phone number string, must carry a leading "+" and country code

    Returns:
        Phone number as "+" followed by 8-15 digits

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    phone = phone.strip()
    if not phone.startswith("+"):
        raise ValueError("Phone number must be in E.164 format (e.g., +1234567890)")

    digits = re.sub(r"\D", "", phone)
    if not 8 <= len(digits) <= 15:
        raise ValueError("Phone number must have between 8 and 15 digits")

    return f"+{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email
