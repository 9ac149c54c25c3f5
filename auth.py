"""Bearer tokens and role guards"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Header, HTTPException
from pymongo.database import Database

from config import Config
from database import get_db
from stores import UserDirectory

logger = logging.getLogger(__name__)

UNAUTHORIZED = "Unauthorized access!!"


def issue_token(claims: Dict[str, Any]) -> str:
    if not Config.ACCESS_TOKEN_SECRET:
        raise RuntimeError("ACCESS_TOKEN_SECRET is not set")
    payload = dict(claims)
    payload["exp"] = datetime.now(timezone.utc) + timedelta(days=Config.TOKEN_TTL_DAYS)
    return jwt.encode(payload, Config.ACCESS_TOKEN_SECRET, algorithm=Config.TOKEN_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, Config.ACCESS_TOKEN_SECRET, algorithms=[Config.TOKEN_ALGORITHM])


def verify_token(authorization: Optional[str] = Header(None)) -> Dict[str, Any]:
    if not authorization:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)
    try:
        scheme, token = authorization.split(" ")
        if scheme.lower() != "bearer":
            raise ValueError("Invalid auth scheme")
    except ValueError:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)

    try:
        return decode_token(token)
    except jwt.PyJWTError as e:
        logger.warning("Rejected token: %s", e)
        raise HTTPException(status_code=401, detail=UNAUTHORIZED)


def require_role(role: str, label: str):
    """Dependency allowing only callers whose stored role is exactly `role`"""

    def guard(decoded: Dict[str, Any] = Depends(verify_token), db: Database = Depends(get_db)) -> Dict[str, Any]:
        user = UserDirectory(db).find(decoded.get("email"))
        if not user or user.get("role") != role:
            raise HTTPException(status_code=403, detail=f"Forbidden Access! {label} Only Actions!")
        return decoded

    return guard


require_admin = require_role("admin", "Admin")
require_member = require_role("member", "Member")
