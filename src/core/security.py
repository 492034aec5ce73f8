import hashlib
import hmac
import secrets
import string
from datetime import timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext

from src.core.config import settings
from src.util.time import utcnow

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT settings
SECRET_KEY = settings.secret_key
ALGORITHM = settings.algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
REFRESH_TOKEN_EXPIRE_DAYS = settings.refresh_token_expire_days

VERIFICATION_TOKEN_LENGTH = 64
_TOKEN_ALPHABET = string.ascii_letters + string.digits


# Password utilities
def verify_password(plain_password: str, hashed_password: str) -> bool:
    if isinstance(plain_password, str):
        plain_password = plain_password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    if isinstance(password, str):
        password = password.encode('utf-8')[:72].decode('utf-8', errors='ignore')
    return pwd_context.hash(password)


# Token hashing (SHA-256 for DB storage; tokens are already high-entropy)
def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def tokens_match(plain_token: str, token_hash: str) -> bool:
    return hmac.compare_digest(hash_token(plain_token), token_hash)


def generate_verification_token(length: int = VERIFICATION_TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


# JWT utilities
def _encode(data: dict, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({
        "exp": utcnow() + expires_delta,
        "type": token_type,
        # two logins in the same second must still yield distinct tokens
        "jti": secrets.token_hex(8),
    })
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, "access", expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, "refresh", expires_delta or timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS))


def decode_access_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None
