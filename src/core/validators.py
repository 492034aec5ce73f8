import re
import unicodedata

from email_validator import EmailNotValidError, validate_email

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8

_TAG_RE = re.compile(r"<[^>]*>")
# letters (any script), spaces, hyphens, apostrophes
_NAME_RE = re.compile(r"^[^\W\d_](?:[^\W\d_]|[\s\-'])*$")


def normalize_name(value: str) -> str:
    """Strip markup and surrounding whitespace, then check the display-name rules."""
    name = _TAG_RE.sub("", value or "").strip()
    if len(name) < NAME_MIN_LENGTH:
        raise ValueError(f"Name must be at least {NAME_MIN_LENGTH} characters.")
    if len(name) > NAME_MAX_LENGTH:
        raise ValueError(f"Name cannot exceed {NAME_MAX_LENGTH} characters.")
    if not _NAME_RE.match(name):
        raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes.")
    return name


def normalize_email(value: str) -> str:
    email = (value or "").strip().lower()
    if not email:
        raise ValueError("New email address is required.")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email cannot exceed {EMAIL_MAX_LENGTH} characters.")
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please provide a valid email address.")
    return email


def _is_symbol(char: str) -> bool:
    # unicode punctuation (P*) or symbol (S*) categories
    return unicodedata.category(char)[0] in ("P", "S")


def check_password_strength(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    if not re.search(r"[a-z]", password) or not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain both upper and lower case letters.")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one number.")
    if not any(_is_symbol(char) for char in password):
        raise ValueError("Password must contain at least one symbol.")
    return password
