"""
Prize Manager：獎項的建立、編輯、刪除與查詢

寫入操作只有 admin 能做（由 core.authorizer 在 API 層把關）
"""
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging

from models import Prize
from core.exceptions import PrizeNotFound
from database import transactional

logger = logging.getLogger(__name__)

# API 欄位名稱 -> Model 欄位名稱
FIELD_MAP = {
    "name": "name",
    "description": "description",
    "eligibility": "eligibility",
    "provider": "provider_id",
    "winner": "winner_id",
}

# NOT NULL 欄位，明確給 null 時保持不變
REQUIRED_FIELDS = ("name",)


class PrizeManager:

    @staticmethod
    @transactional
    def create_prize(db: Session, event_id: str, attrs: Dict) -> Prize:
        prize = Prize(
            event_id=event_id,
            name=attrs["name"],
            description=attrs.get("description"),
            eligibility=attrs.get("eligibility"),
            provider_id=attrs.get("provider"),
        )
        db.add(prize)
        db.flush()
        logger.info(f"Created prize {prize.id} ({prize.name}) in event {event_id}")
        return prize

    @staticmethod
    @transactional
    def edit_prize(db: Session, prize_id: str, updates: Dict) -> Prize:
        """只更新 updates 裡出現的欄位；name 給 null 時不變"""
        prize = PrizeManager.get_prize(db, prize_id)
        for field, column in FIELD_MAP.items():
            if field not in updates:
                continue
            if field in REQUIRED_FIELDS and updates[field] is None:
                continue
            setattr(prize, column, updates[field])
        logger.info(f"Edited prize {prize_id}: {sorted(updates)}")
        return prize

    @staticmethod
    @transactional
    def delete_prize(db: Session, prize_id: str) -> None:
        prize = PrizeManager.get_prize(db, prize_id)
        db.delete(prize)
        logger.info(f"Deleted prize {prize_id}")

    @staticmethod
    def get_prize(db: Session, prize_id: str) -> Prize:
        prize = db.query(Prize).filter(Prize.id == prize_id).first()
        if not prize:
            raise PrizeNotFound(prize_id)
        return prize

    @staticmethod
    def list_prizes(db: Session, event_id: Optional[str] = None) -> List[Prize]:
        query = db.query(Prize)
        if event_id is not None:
            query = query.filter(Prize.event_id == event_id)
        return query.order_by(Prize.created_at).all()
