from datetime import datetime, timedelta, timezone
import hashlib
import hmac
import re
import secrets
from typing import Any, Dict, Optional, Tuple
from email_validator import validate_email, EmailNotValidError
from jose import jwt, JWTError
from skolara.config.settings import config_settings

JWT_SECRET = config_settings.JWT_SECRET
JWT_ALGO = config_settings.JWT_ALGO
TOKEN_HASH_ALGO = config_settings.TOKEN_HASH_ALGO
DEFAULT_COUNTRY_CODE = config_settings.DEFAULT_COUNTRY_CODE


def format_phone_number(raw: str) -> str:
    """
    Normalise user input into E.164-ish form.
    "+447911123456" stays as is, a bare 10 digit number gets the default
    country code and anything else is just prefixed with "+".
    """
    raw = (raw or "").strip()
    digits = re.sub(r"\D", "", raw)
    if not digits:
        raise ValueError("Phone number must contain digits")
    if raw.startswith("+"):
        return f"+{digits}"
    if len(digits) == 10:
        return f"+{DEFAULT_COUNTRY_CODE}{digits}"
    return f"+{digits}"


def phone_digits(formatted: str) -> int:
    return int(re.sub(r"\D", "", formatted))


def create_token(user_id: int, phone_number: int, token_type: str, expires_in: timedelta) -> Tuple[str, datetime]:
    now = datetime.now(timezone.utc)
    expiry = now + expires_in
    payload = {
        "sub": str(user_id),
        "user_id": user_id,
        "phone_number": phone_number,
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int(expiry.timestamp()),
        "jti": secrets.token_hex(16),
    }
    token = jwt.encode(claims=payload, key=JWT_SECRET, algorithm=JWT_ALGO)
    return token, expiry


def decode_token(token: str, verify_exp: bool = True) -> Optional[Dict[str, Any]]:
    """Verify signature (and expiry unless told otherwise), None when invalid."""
    try:
        claims = jwt.decode(
            token,
            key=JWT_SECRET,
            algorithms=[JWT_ALGO],
            options={"verify_exp": verify_exp},
        )
    except JWTError:
        return None
    if "user_id" not in claims or "phone_number" not in claims:
        return None
    return claims


def hash_token(plain: str) -> str:
    hash_func = getattr(hashlib, TOKEN_HASH_ALGO)
    return hash_func(plain.encode()).hexdigest()


def token_matches(plain: str, stored_hash: Optional[str]) -> bool:
    if not stored_hash:
        return False
    return hmac.compare_digest(hash_token(plain), stored_hash)


def generate_otp(length: int) -> str:
    first = str(secrets.randbelow(9) + 1)
    return first + "".join(str(secrets.randbelow(10)) for _ in range(length - 1))


def normalize_email_address(email: str) -> str:
    """
    Validate and return normalized email (lowercased).
    Raises ValueError if invalid.
    """
    try:
        v = validate_email(email.strip(), check_deliverability=False)
        return v.normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(str(e))
