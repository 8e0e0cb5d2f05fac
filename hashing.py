import hashlib
import re
from typing import Optional

COUNTRY_PREFIX = "62"
TRUNK_PREFIX = "0"

NON_DIGITS = re.compile(r"\D")


def hash_data(value: Optional[str]) -> Optional[str]:
    """SHA-256 hex digest of the lowercased, trimmed value.

    Meta matches users by comparing digests, so the value must be normalized
    exactly this way before hashing. Returns None for missing or empty input.
    """
    if not value:
        return None
    return hashlib.sha256(value.lower().strip().encode()).hexdigest()


def format_phone(phone: Optional[str]) -> Optional[str]:
    """Digits-only international form with the Indonesian country code.

    Numbers that already start with the country code are returned as-is;
    no length check is made.
    """
    if not phone:
        return None
    digits = NON_DIGITS.sub("", phone)
    if not digits.startswith(COUNTRY_PREFIX):
        if digits.startswith(TRUNK_PREFIX):
            digits = COUNTRY_PREFIX + digits[1:]
        else:
            digits = COUNTRY_PREFIX + digits
    return digits
