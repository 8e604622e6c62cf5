"""
Identity token helpers.

The identity provider signs a JWT whose ``sub`` is the employee id. The engine only
verifies the signature and reads the subject; it never handles credentials itself.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from attendance_engine.core.config import settings

logger = logging.getLogger(__name__)


def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None, **claims: Any) -> str:
    """
    Mint a signed identity token (used by the identity provider and by tests)

    Args:
        subject: Employee id placed in the ``sub`` claim
        expires_delta: Token lifetime (defaults to JWT_EXPIRE_MINUTES)
        claims: Extra claims to embed

    Returns:
        Encoded JWT string
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES))
    payload: Dict[str, Any] = {**claims, "sub": str(subject), "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify an identity token

    Raises:
        ValueError: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug("Rejected identity token: %s", e)
        raise ValueError("Invalid token") from e
