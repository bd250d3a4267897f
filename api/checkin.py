"""
Check-In API Endpoints

職責：
1. 建立 / 編輯報到項目（admin）
2. 列出報到項目（任何登入的使用者）
3. 報到：participant 只能替自己報到；admin 可以替任何使用者報到
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import (
    CheckInItemCreate,
    CheckInItemResponse,
    CheckInItemUpdate,
    CheckInRequest,
    CheckInResponse,
)
from api.common import get_caller
from core.authorizer import Operation, Target, require, resolve_subject
from core.checkin import CheckInManager
from core.identity import Identity

router = APIRouter(prefix="/api/check-in", tags=["check-in"])
logger = logging.getLogger(__name__)


@router.post("", response_model=CheckInItemResponse)
def add_new_check_in_item(
    item_data: CheckInItemCreate,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    require(caller, Operation.CREATE_CHECKIN_ITEM, Target.nothing())
    item = CheckInManager.create_item(db, item_data.model_dump())
    return CheckInItemResponse.model_validate(item)


@router.get("", response_model=List[CheckInItemResponse])
def get_check_in_items(caller: Identity = Depends(get_caller), db: Session = Depends(get_db)):
    require(caller, Operation.LIST_CHECKIN_ITEMS, Target.nothing())
    return [CheckInItemResponse.model_validate(item) for item in CheckInManager.list_items(db)]


@router.patch("/{item_id}", response_model=CheckInItemResponse)
def edit_check_in_item(
    item_id: str,
    updates: CheckInItemUpdate,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """編輯報到項目，未指定的欄位不變"""
    require(caller, Operation.EDIT_CHECKIN_ITEM, Target.nothing())
    item = CheckInManager.edit_item(db, item_id, updates.model_dump(exclude_unset=True))
    return CheckInItemResponse.model_validate(item)


@router.post("/{item_id}/check-in", response_model=CheckInResponse)
def check_in(
    item_id: str,
    request: CheckInRequest,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    報到（冪等）

    重複報到返回 created=False，不會重複給分
    """
    subject = resolve_subject(db, caller, request.user_id or caller.user_id)
    require(caller, Operation.CHECK_IN, Target.user(subject))

    record, created = CheckInManager.check_in(db, caller, subject.user_id, item_id)
    return CheckInResponse(
        item_id=record.item_id,
        user_id=record.user_id,
        points=record.points,
        created=created,
    )
