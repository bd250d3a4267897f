"""
Prize API Endpoints

- 列表、查詢：任何登入的使用者
- 建立、編輯、刪除：admin
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models import Event
from schemas import MessageResponse, PrizeCreate, PrizeResponse, PrizeUpdate
from api.common import get_caller, get_event
from core.authorizer import Operation, Target, require
from core.identity import Identity
from core.prize_manager import PrizeManager

router = APIRouter(prefix="/api/prizes", tags=["prizes"])


@router.get("", response_model=List[PrizeResponse])
def get_all_prizes(
    caller: Identity = Depends(get_caller),
    event: Event = Depends(get_event),
    db: Session = Depends(get_db)
):
    require(caller, Operation.LIST_PRIZES, Target.nothing())
    return [PrizeResponse.model_validate(prize) for prize in PrizeManager.list_prizes(db, event.id)]


@router.get("/{prize_id}", response_model=PrizeResponse)
def get_prize_by_id(
    prize_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    prize = PrizeManager.get_prize(db, prize_id)
    require(caller, Operation.GET_PRIZE, Target.prize(prize))
    return PrizeResponse.model_validate(prize)


@router.post("", response_model=PrizeResponse)
def create_new_prize(
    prize_data: PrizeCreate,
    caller: Identity = Depends(get_caller),
    event: Event = Depends(get_event),
    db: Session = Depends(get_db)
):
    require(caller, Operation.CREATE_PRIZE, Target.nothing())
    prize = PrizeManager.create_prize(db, event.id, prize_data.model_dump())
    return PrizeResponse.model_validate(prize)


@router.patch("/{prize_id}", response_model=PrizeResponse)
def edit_prize(
    prize_id: str,
    updates: PrizeUpdate,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    prize = PrizeManager.get_prize(db, prize_id)
    require(caller, Operation.EDIT_PRIZE, Target.prize(prize))

    prize = PrizeManager.edit_prize(db, prize_id, updates.model_dump(exclude_unset=True))
    return PrizeResponse.model_validate(prize)


@router.delete("/{prize_id}", response_model=MessageResponse)
def delete_prize(
    prize_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    prize = PrizeManager.get_prize(db, prize_id)
    require(caller, Operation.DELETE_PRIZE, Target.prize(prize))

    PrizeManager.delete_prize(db, prize_id)
    return MessageResponse(message="Successfully deleted prize.")
