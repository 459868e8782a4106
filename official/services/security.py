from datetime import datetime, timedelta, timezone
import logging
from jose import jwt, JWTError
from fastapi import HTTPException, status
from official.config import settings

logger = logging.getLogger(__name__)

def create_access_token(user_id: str, phone: str, days: int | None = None) -> str:
    exp_days = days if days is not None else settings.access_token_days
    expire = datetime.now(timezone.utc) + timedelta(days=exp_days)
    payload = {"sub": user_id, "userId": user_id, "phone": phone, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret.get_secret_value(), algorithm=settings.jwt_algorithm)

def decode_access_token(token: str) -> dict:
    """
    Decode a session token issued by create_access_token.

    Raises:
        HTTPException 401: If the token is invalid, expired, or missing userId/phone
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret.get_secret_value(), algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info(f"Rejected access token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    if not payload.get("userId") or not payload.get("phone"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return payload
