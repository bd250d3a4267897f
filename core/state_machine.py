"""
Admission State Machine：集中管理使用者錄取狀態的轉換

    pending ──admit──> admitted
       │
       └───reject──> rejected

只有 admin 能觸發（由 core.authorizer 在 API 層把關）。

已決定的使用者再次被錄取 / 拒絕時的行為由 settings.admission_policy 決定：
- last_write_wins（預設）：直接覆寫，admit 之後 reject 結果是 rejected
- strict：同狀態重複套用是 no-op，admitted <-> rejected 互轉拋出 InvalidStateTransition
"""
from sqlalchemy.orm import Session
import logging

from models import AdmissionStatus, User
from core.locks import with_user_lock
from core.exceptions import InvalidStateTransition, UserNotFound
from database import get_settings, transactional

logger = logging.getLogger(__name__)

LAST_WRITE_WINS = "last_write_wins"
STRICT = "strict"

TERMINAL_STATES = {AdmissionStatus.ADMITTED, AdmissionStatus.REJECTED}


def is_valid_transition(current: AdmissionStatus, target: AdmissionStatus, policy: str) -> bool:
    """
    檢查狀態轉換是否合法

    範例（strict）：
        is_valid_transition(PENDING, ADMITTED, STRICT) -> True
        is_valid_transition(ADMITTED, ADMITTED, STRICT) -> True
        is_valid_transition(ADMITTED, REJECTED, STRICT) -> False
    """
    if target not in TERMINAL_STATES:
        return False
    if policy == LAST_WRITE_WINS:
        return True
    return current == AdmissionStatus.PENDING or current == target


class AdmissionStateMachine:

    @staticmethod
    def transition(db: Session, user_id: str, target: AdmissionStatus, policy: str = None) -> User:
        """
        轉換使用者的錄取狀態（不 commit，由呼叫者的 transaction 處理）

        參數：
            db: SQLAlchemy Session
            user_id: 使用者 id
            target: ADMITTED 或 REJECTED
            policy: 不指定則使用 settings.admission_policy

        異常：
            UserNotFound: 使用者不存在
            InvalidStateTransition: strict policy 下的非法轉換
        """
        policy = policy or get_settings().admission_policy

        user = with_user_lock(user_id, db).first()
        if not user:
            raise UserNotFound(user_id)

        current = user.admission_status
        if not is_valid_transition(current, target, policy):
            raise InvalidStateTransition(
                f"Cannot change admission of user {user_id} "
                f"from {current.value} to {target.value}"
            )

        user.admission_status = target
        db.flush()

        logger.info(
            f"User {user_id} admission: {current.value} -> {target.value} (policy={policy})"
        )
        return user

    @staticmethod
    @transactional
    def admit(db: Session, user_id: str, policy: str = None) -> User:
        return AdmissionStateMachine.transition(db, user_id, AdmissionStatus.ADMITTED, policy)

    @staticmethod
    @transactional
    def reject(db: Session, user_id: str, policy: str = None) -> User:
        return AdmissionStateMachine.transition(db, user_id, AdmissionStatus.REJECTED, policy)
