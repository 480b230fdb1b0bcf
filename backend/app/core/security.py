"""
Credential store and session-cookie signing.

Passwords are stored as ``<hex digest>.<hex salt>``; the digest is derived
with bcrypt-pbkdf, a CPU-hard KDF, over the password and a random salt.
"""
from typing import FrozenSet, Optional
import binascii
import hashlib
import hmac
import secrets

import bcrypt

from app.core.config import settings
from app.core.exceptions import HashingError, FormatError

HASH_SEPARATOR = "."

# Ids of the demo accounts created on first run. Only these may still carry
# a plaintext password, and only until an admin sets a real one.
BOOTSTRAP_ACCOUNT_IDS: FrozenSet[int] = frozenset({1, 2, 3})


def _derive(password: str, salt: bytes, rounds: int, key_length: int) -> bytes:
    # sha256 pre-hash: bcrypt-pbkdf rejects an empty password
    return bcrypt.kdf(
        password=hashlib.sha256(password.encode("utf-8")).digest(),
        salt=salt,
        desired_key_bytes=key_length,
        rounds=rounds,
        ignore_few_rounds=True,
    )


def hash_password(password: str) -> str:
    """Hash password as ``digest.salt``; raises HashingError on KDF failure"""
    try:
        salt = secrets.token_bytes(settings.KDF_SALT_BYTES)
        digest = _derive(password, salt, settings.KDF_ROUNDS, settings.KDF_KEY_LENGTH)
    except (ValueError, TypeError) as e:
        raise HashingError() from e
    return f"{digest.hex()}{HASH_SEPARATOR}{salt.hex()}"


def verify_password(supplied: str, stored: str) -> bool:
    """
    Check ``supplied`` against a stored ``digest.salt`` value.

    Raises FormatError when ``stored`` is not exactly two non-empty hex parts.
    The comparison runs in constant time over the full digest.
    """
    parts = stored.split(HASH_SEPARATOR) if stored else []
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise FormatError()

    try:
        expected = binascii.unhexlify(parts[0])
        salt = binascii.unhexlify(parts[1])
    except (binascii.Error, ValueError) as e:
        raise FormatError() from e

    try:
        candidate = _derive(supplied, salt, settings.KDF_ROUNDS, len(expected))
    except (ValueError, TypeError) as e:
        raise HashingError("Password comparison failed") from e

    return hmac.compare_digest(candidate, expected)


def is_hashed(stored: Optional[str]) -> bool:
    return bool(stored) and HASH_SEPARATOR in stored


def verify_bootstrap_password(user_id: int, supplied: str, stored: str) -> bool:
    """
    Plaintext match for the seeded demo accounts.

    Applies only to ids in BOOTSTRAP_ACCOUNT_IDS whose stored value was never
    hashed. Every account created through the API is hashed, so this never
    matches for them.
    """
    if user_id not in BOOTSTRAP_ACCOUNT_IDS or is_hashed(stored):
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))


def check_credentials(user_id: int, supplied: str, stored: str) -> bool:
    """Login check: bootstrap exception first, then the KDF comparison"""
    if user_id in BOOTSTRAP_ACCOUNT_IDS and not is_hashed(stored):
        return verify_bootstrap_password(user_id, supplied, stored)
    return verify_password(supplied, stored)


# ==================== Session cookie ====================

def generate_session_id() -> str:
    """Opaque, unguessable session key"""
    return secrets.token_urlsafe(32)


def _signature(session_id: str) -> str:
    mac = hmac.new(
        settings.SESSION_SECRET.encode("utf-8"),
        session_id.encode("utf-8"),
        hashlib.sha256,
    )
    return mac.hexdigest()


def sign_session_id(session_id: str) -> str:
    """Cookie value: ``<session id>.<hmac-sha256>``"""
    return f"{session_id}.{_signature(session_id)}"


def unsign_session_id(cookie_value: Optional[str]) -> Optional[str]:
    """Return the session id if the cookie signature checks out, else None"""
    if not cookie_value or "." not in cookie_value:
        return None
    session_id, _, signature = cookie_value.rpartition(".")
    if not session_id:
        return None
    if not hmac.compare_digest(signature, _signature(session_id)):
        return None
    return session_id
