import secrets
import string

DEFAULT_PIN_LENGTH = 6


def generate_pin(length: int = DEFAULT_PIN_LENGTH) -> str:
    """Fixed-length numeric PIN from the OS CSPRNG."""
    if length <= 0:
        length = DEFAULT_PIN_LENGTH
    return "".join(secrets.choice(string.digits) for _ in range(length))


def generate_barcode_token(nbytes: int = 24) -> str:
    return secrets.token_urlsafe(nbytes)


def build_session_barcode(class_id, date_key: str, token: str) -> str:
    return f"{class_id}-{date_key}-{token}"
