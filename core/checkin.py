"""
Check-In：報到資格判斷與報到紀錄

資格規則（依序）：
1. now 必須落在 [start_time, end_time)，否則 OutOfWindow
2. admin 永遠可以（包括替其他使用者報到）
3. 項目沒開放自行報到 -> SelfCheckInDisabled
4. 使用者的 access tier 必須 >= 項目要求的 tier -> 否則 InsufficientAccess

tier 的順序由 settings.access_levels 決定（由低到高）。

報到紀錄是集合插入：同一使用者同一項目報到兩次是 no-op，不會重複給分。
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from models import CheckInItem, CheckInRecord, now_ms
from core.authorizer import Decision
from core.exceptions import CheckInItemNotFound, ErrorKind, Invalid
from core.identity import Identity
from core.locks import with_checkin_item_lock
from database import get_settings, transactional

logger = logging.getLogger(__name__)

ITEM_FIELDS = (
    "name", "description", "start_time", "end_time",
    "points", "access_level", "enable_self_check_in",
)


def tier_rank(level: str, levels: Optional[Sequence[str]] = None) -> int:
    """
    取得 access tier 的排名（越大權限越高）

    異常：
        Invalid: 未知的 tier
    """
    levels = list(levels or get_settings().access_levels)
    try:
        return levels.index(level)
    except ValueError:
        raise Invalid(f"Unknown access level '{level}', expected one of {levels}")


def can_check_in(
    caller: Identity,
    item: CheckInItem,
    now: int,
    levels: Optional[Sequence[str]] = None
) -> Decision:
    """
    判斷呼叫者現在能不能對這個項目報到（純函式，不寫資料）

    參數：
        caller: 執行報到的人（admin 替別人報到時是 admin 本人）
        item: 報到項目
        now: 目前時間（epoch milliseconds）
        levels: tier 順序，不指定則使用設定值

    範例：
        item: [1000, 2000), general, 開放自行報到
        can_check_in(general_participant, item, 1500) -> ALLOW
        can_check_in(general_participant, item, 2500) -> DENY(OutOfWindow)
    """
    if not (item.start_time <= now < item.end_time):
        return Decision.deny(ErrorKind.OUT_OF_WINDOW, f"{item.name} is not open for check-in.")

    if caller.is_admin:
        return Decision.allow()

    if not item.enable_self_check_in:
        return Decision.deny(
            ErrorKind.SELF_CHECK_IN_DISABLED,
            f"Self check-in is disabled for {item.name}."
        )

    if tier_rank(caller.access_level, levels) < tier_rank(item.access_level, levels):
        return Decision.deny(
            ErrorKind.INSUFFICIENT_ACCESS,
            f"{item.name} requires access level '{item.access_level}'."
        )

    return Decision.allow()


def _validate_item(item: CheckInItem) -> None:
    if item.start_time >= item.end_time:
        raise Invalid("startTime must be before endTime")
    if item.points is not None and item.points < 0:
        raise Invalid("points must not be negative")
    tier_rank(item.access_level)


class CheckInManager:
    """報到項目與報到紀錄管理器"""

    @staticmethod
    @transactional
    def create_item(db: Session, attrs: Dict) -> CheckInItem:
        item = CheckInItem(**{field: attrs[field] for field in ITEM_FIELDS if field in attrs})
        if item.access_level is None:
            item.access_level = get_settings().access_levels[0]
        if item.points is None:
            item.points = 0
        if item.enable_self_check_in is None:
            item.enable_self_check_in = False
        _validate_item(item)

        db.add(item)
        db.flush()
        logger.info(f"Created check-in item {item.id} ({item.name})")
        return item

    @staticmethod
    @transactional
    def edit_item(db: Session, item_id: str, updates: Dict) -> CheckInItem:
        """
        編輯報到項目，未指定的欄位不變

        異常：
            CheckInItemNotFound: 項目不存在
            Invalid: 修改後時間範圍或 tier 不合法
        """
        item = with_checkin_item_lock(item_id, db).first()
        if not item:
            raise CheckInItemNotFound(item_id)

        for field in ITEM_FIELDS:
            if updates.get(field) is not None:
                setattr(item, field, updates[field])
        _validate_item(item)

        logger.info(f"Edited check-in item {item_id}: {sorted(updates)}")
        return item

    @staticmethod
    def get_item(db: Session, item_id: str) -> CheckInItem:
        item = db.query(CheckInItem).filter(CheckInItem.id == item_id).first()
        if not item:
            raise CheckInItemNotFound(item_id)
        return item

    @staticmethod
    def list_items(db: Session) -> List[CheckInItem]:
        return db.query(CheckInItem).order_by(CheckInItem.start_time).all()

    @staticmethod
    @transactional
    def check_in(
        db: Session,
        caller: Identity,
        user_id: str,
        item_id: str,
        now: Optional[int] = None
    ) -> Tuple[CheckInRecord, bool]:
        """
        報到（冪等）

        流程：
        1. 找到項目
        2. 判斷資格（can_check_in）
        3. 已有紀錄 -> 直接返回既有紀錄
        4. 建立紀錄，給分

        參數：
            caller: 執行報到的人
            user_id: 被報到的使用者（participant 自行報到時等於 caller.user_id）
            now: 不指定則使用目前時間

        返回：
            (CheckInRecord, created) - created 為 False 表示之前已經報到過
        """
        now = now_ms() if now is None else now
        item = CheckInManager.get_item(db, item_id)

        can_check_in(caller, item, now).raise_if_denied()

        existing = CheckInManager.find_record(db, user_id, item_id)
        if existing:
            logger.info(f"User {user_id} already checked in to {item_id}")
            return existing, False

        record = CheckInRecord(
            user_id=user_id,
            item_id=item_id,
            points=item.points,
            checked_in_at=now,
            checked_in_by=caller.user_id,
        )
        db.add(record)
        try:
            db.flush()
        except IntegrityError:
            # 同時報到，另一個請求已經寫入
            db.rollback()
            return CheckInManager.find_record(db, user_id, item_id), False

        logger.info(f"User {user_id} checked in to {item_id} (+{item.points})")
        return record, True

    @staticmethod
    def find_record(db: Session, user_id: str, item_id: str) -> Optional[CheckInRecord]:
        return db.query(CheckInRecord).filter(
            CheckInRecord.user_id == user_id,
            CheckInRecord.item_id == item_id
        ).first()

    @staticmethod
    def get_history(db: Session, user_id: str) -> List[CheckInRecord]:
        return db.query(CheckInRecord).filter(
            CheckInRecord.user_id == user_id
        ).order_by(CheckInRecord.checked_in_at).all()
