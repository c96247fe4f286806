import base64
import binascii
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta
from typing import Any, Optional

from jose import JWTError, jwt
from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

# =====================================================
# Application Settings
# =====================================================
from quizmaker.core.config import settings

logger = logging.getLogger(__name__)


# =====================================================
# Password Hashing (PBKDF2-HMAC-SHA256)
# =====================================================
SALT_BYTES = 16
DERIVED_KEY_BYTES = 32  # 256-bit output


def _password_kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=DERIVED_KEY_BYTES,
        salt=salt,
        iterations=iterations,
    )


def get_password_hash(password: str, iterations: Optional[int] = None) -> str:
    """
    Hash a password.

    Returns base64(salt || derived_key). A fresh random salt is drawn on
    every call, so hashing the same password twice gives different strings.
    """
    if not password:
        raise ValueError("Password cannot be empty")

    salt = os.urandom(SALT_BYTES)
    derived = _password_kdf(
        salt, iterations or settings.PASSWORD_HASH_ITERATIONS
    ).derive(password.encode("utf-8"))
    return base64.b64encode(salt + derived).decode("ascii")


def verify_password(
    plain_password: str,
    hashed_password: str,
    iterations: Optional[int] = None,
) -> bool:
    """
    Verify a password against its hashed value.

    Never raises: malformed stored values simply fail verification.
    """
    if not plain_password or not hashed_password:
        return False

    try:
        combined = base64.b64decode(hashed_password.encode("ascii"), validate=True)
    except (binascii.Error, ValueError, UnicodeEncodeError):
        return False

    salt, stored_key = combined[:SALT_BYTES], combined[SALT_BYTES:]
    if len(salt) != SALT_BYTES or len(stored_key) != DERIVED_KEY_BYTES:
        return False

    try:
        # PBKDF2HMAC.verify compares in constant time
        _password_kdf(
            salt, iterations or settings.PASSWORD_HASH_ITERATIONS
        ).verify(plain_password.encode("utf-8"), stored_key)
    except InvalidKey:
        return False
    return True


_dummy_hash: Optional[str] = None


def get_dummy_password_hash() -> str:
    """
    A valid hash of a random secret, used to spend the same KDF cost when a
    login names an unknown email.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash(base64.b64encode(os.urandom(24)).decode("ascii"))
    return _dummy_hash


# =====================================================
# Signed Tokens
# =====================================================
@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    role: str


class TokenManager:
    """
    Issues and verifies HS256 signed session tokens.

    The signing secret is passed in explicitly; nothing here reads the
    environment.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_days: int = 7,
    ):
        if not secret_key:
            raise ValueError("secret_key must be a non-empty string")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_days = expire_days

    def issue_token(
        self,
        user_id: Any,
        role: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """
        Create a token carrying the user id and role.

        Format: base64url(header).base64url(payload).base64url(signature)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(days=self.expire_days))

        to_encode = {
            "userId": str(user_id),
            "role": role,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: Optional[str]) -> Optional[TokenPayload]:
        """
        Verify a token and return its principal, or None.

        Wrong segment count, bad signature, expiry in the past and missing
        claims all yield None.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            return None

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            return None

        # jose only checks exp when present
        if "exp" not in payload:
            return None

        user_id = payload.get("userId")
        role = payload.get("role")
        if not isinstance(user_id, str) or not user_id or not isinstance(role, str):
            return None

        return TokenPayload(user_id=user_id, role=role)


def get_token_manager() -> TokenManager:
    """Build the application's token manager from settings."""
    return TokenManager(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_days=settings.AUTH_TOKEN_EXPIRE_DAYS,
    )
