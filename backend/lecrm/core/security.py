"""JWT helpers for the bearer-token actor identity."""

from __future__ import annotations

import datetime as dt
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from lecrm.core.config import settings

ACCESS_TOKEN_TYPE = "access"


def create_access_token(data: dict[str, Any], expires_minutes: int | None = None) -> str:
    to_encode = data.copy()
    now = dt.datetime.now(dt.timezone.utc)
    expire = now + dt.timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"type": ACCESS_TOKEN_TYPE, "iat": int(now.timestamp()), "exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str, *, verify_exp: bool = True) -> dict[str, Any]:
    options = {"verify_exp": verify_exp}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options=options,
        )
    except ExpiredSignatureError as exc:
        raise ValueError("expired_token") from exc
    except JWTError as exc:
        raise ValueError("invalid_token") from exc
