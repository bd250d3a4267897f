"""
API 共用的 dependencies 與錯誤對應

- get_caller：從 X-User-Id header 解析呼叫者身分（每個請求重新解析）
- get_event：每個請求解析一次目前活動，再明確傳給 core
- STATUS_BY_KIND：core 的 ErrorKind -> HTTP status code
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from models import Event
from core.exceptions import ErrorKind, UserNotFound
from core.identity import Identity, resolve_identity
from services.event_service import get_current_event

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.NOT_OWNER: 403,
    ErrorKind.NO_TEAM: 400,
    ErrorKind.DUPLICATE_PROJECT: 409,
    ErrorKind.OUT_OF_WINDOW: 403,
    ErrorKind.SELF_CHECK_IN_DISABLED: 403,
    ErrorKind.INSUFFICIENT_ACCESS: 403,
    ErrorKind.INVALID: 400,
}


def get_caller(
    x_user_id: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> Identity:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        return resolve_identity(db, x_user_id)
    except UserNotFound:
        raise HTTPException(status_code=401, detail="Unknown user")


def get_event(db: Session = Depends(get_db)) -> Event:
    return get_current_event(db)
