import re
from typing import Optional

from .config import config

WHATSAPP_PREFIX = "whatsapp:"


def normalize_phone(phone: str, country_code: Optional[str] = None) -> str:
    """
    Normalize a phone number to E.164 digits (no '+').
    '01012345678' -> '201012345678' for country code 20.
    """
    cc = country_code or config.PHONE_COUNTRY_CODE
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise ValueError("Phone number has no digits")

    # Local trunk prefix
    if digits.startswith("0"):
        digits = cc + digits[1:]

    if not digits.startswith(cc):
        digits = cc + digits

    return digits


def format_whatsapp_address(phone: str, country_code: Optional[str] = None) -> str:
    """Format a phone number as a Twilio WhatsApp address: whatsapp:+<digits>"""
    return f"{WHATSAPP_PREFIX}+{normalize_phone(phone, country_code)}"


def format_whatsapp_sender(sender: str) -> str:
    """Sending address as configured, with the whatsapp: scheme added if missing"""
    sender = (sender or "").strip()
    if sender.startswith(WHATSAPP_PREFIX):
        return sender
    return f"{WHATSAPP_PREFIX}{sender}"


def mask_phone(phone: Optional[str]) -> str:
    """Truncate a phone number for logs"""
    if not phone:
        return "NOT FOUND"
    return f"{str(phone)[:5]}..."


def sanitize_name(name: Optional[str]) -> str:
    """Collapse whitespace in a display name"""
    if not name:
        return ""
    return " ".join(str(name).split())
