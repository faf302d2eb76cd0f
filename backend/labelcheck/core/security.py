from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
import logging
from labelcheck.core.config import settings

logger = logging.getLogger(__name__)


# Sessions are managed by the external auth layer; this module only
# mints (for tooling and tests) and decodes the bearer tokens it hands out.
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:

    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )

    return encoded_jwt

def decode_access_token(token: str) -> Optional[dict]:

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms= [settings.ALGORITHM]
        )
        return payload
    except JWTError as e:
        logger.info(f"Rejected bearer token: {e}")
        return None
