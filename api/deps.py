from typing import Optional
from fastapi import Header, HTTPException, Request

from core.db import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_user_id(x_user_id: Optional[str] = Header(None)) -> int:
    # Set by the authentication gateway in front of this service
    if x_user_id is None or not x_user_id.isdigit():
        raise HTTPException(401, {"code": "UNAUTHENTICATED", "message": "Missing or invalid X-User-Id"})
    return int(x_user_id)
