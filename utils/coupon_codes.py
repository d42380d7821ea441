# ====================================================
# utils/coupon_codes.py
# ====================================================
import re
import secrets

from config import COUPON_CODE_PREFIX

# Uppercase letters + digits without the look-alikes 0/O and 1/I
COUPON_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
COUPON_BODY_LENGTH = 6

COUPON_CODE_PATTERN = re.compile(
    rf"^{re.escape(COUPON_CODE_PREFIX)}[{COUPON_ALPHABET}]{{{COUPON_BODY_LENGTH}}}$"
)


def generate_coupon_code(prefix: str = COUPON_CODE_PREFIX) -> str:
    """Return a code like 'GFK7F9X2' (brand prefix + 6 random symbols)."""
    body = "".join(secrets.choice(COUPON_ALPHABET) for _ in range(COUPON_BODY_LENGTH))
    return f"{prefix}{body}"


def normalize_coupon_code(code: str) -> str:
    """Users type codes by hand: strip blanks and uppercase."""
    return (code or "").strip().replace(" ", "").replace("-", "").upper()


def is_valid_coupon_code(code: str) -> bool:
    return bool(COUPON_CODE_PATTERN.match(code or ""))
