"""
並發控制工具

提供 Database-level 的行級鎖，防止 read-modify-write 的競態條件

主要使用 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）；
SQLite 不支援 FOR UPDATE，SQLAlchemy 會直接忽略

注意：
    「每個隊伍每個活動最多一個專案」不靠這裡的鎖，
    而是靠 projects 表上的 (team_id, event_id) 唯一約束
"""
from sqlalchemy.orm import Session, Query

from models import CheckInItem, Project, User


def with_user_lock(user_id: str, db: Session) -> Query:
    """
    鎖定一個 User（行級鎖）

    使用場景：
    - 錄取 / 拒絕使用者（admission 狀態轉換）
    - 加入 / 離開隊伍

    範例：
        user = with_user_lock(user_id, db).first()
        if not user:
            raise UserNotFound(user_id)
        user.admission_status = AdmissionStatus.ADMITTED
        db.commit()

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）
    """
    return db.query(User).filter(
        User.id == user_id
    ).with_for_update(nowait=False)


def with_project_lock(project_id: str, db: Session) -> Query:
    """
    鎖定一個 Project（行級鎖）

    使用場景：
    - 報名獎項（集合插入）
    - 編輯專案
    """
    return db.query(Project).filter(
        Project.id == project_id
    ).with_for_update(nowait=False)


def with_checkin_item_lock(item_id: str, db: Session) -> Query:
    """鎖定一個 CheckInItem，編輯時間範圍時使用"""
    return db.query(CheckInItem).filter(
        CheckInItem.id == item_id
    ).with_for_update(nowait=False)
