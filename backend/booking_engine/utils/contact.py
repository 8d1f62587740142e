import re

_PHONE_NOISE = re.compile(r"[\s\-()]")


def normalize_phone(phone: str, *, default_prefix: str = "+36") -> str:
    """Bring a guest-typed phone number into international ``+`` form.

    ``00`` becomes ``+``, a national ``06`` trunk prefix becomes the default
    country prefix, and bare numbers get the default prefix prepended.
    """
    cleaned = _PHONE_NOISE.sub("", phone or "")
    if not cleaned:
        return ""
    if cleaned.startswith("00"):
        return "+" + cleaned[2:]
    if cleaned.startswith("06"):
        return default_prefix + cleaned[2:]
    if not cleaned.startswith("+"):
        return default_prefix + cleaned
    return cleaned


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def mask_phone(phone: str) -> str:
    """Hide the middle digits of a phone number, keeping the last four."""
    if not phone or len(phone) < 10:
        return phone
    return phone[:-7] + "••• •" + phone[-4:]
