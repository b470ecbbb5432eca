# accountflow/validation.py
import re
from typing import Dict, Optional

# fullmatch: a trailing newline must not pass
PHONE_RE = re.compile(r"1[3-9][0-9]{9}")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def validate_phone(phone: Optional[str]) -> bool:
    if not phone or phone.strip() == "":
        return False
    return PHONE_RE.fullmatch(phone.strip()) is not None


def validate_email(email: Optional[str]) -> bool:
    if not email:
        return False
    return EMAIL_RE.fullmatch(email) is not None


def is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def registration_errors(username: str, phone: str, email: str, code: str) -> Dict[str, str]:
    """Collect every field error at once so they can all be shown together."""
    errors: Dict[str, str] = {}
    if is_blank(username):
        errors["username"] = "Please enter a username"
    if not validate_phone(phone):
        errors["phone"] = "Please enter a valid phone number"
    if not validate_email(email):
        errors["email"] = "Please enter a valid email address"
    if is_blank(code):
        errors["code"] = "Please enter the verification code"
    return errors


def phone_errors(phone: str) -> Dict[str, str]:
    if is_blank(phone):
        return {"phone": "Please enter a phone number"}
    if not validate_phone(phone):
        return {"phone": "Please enter a phone number in the correct format"}
    return {}
