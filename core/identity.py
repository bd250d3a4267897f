"""
Identity Resolver：使用者 id -> (role, team_id)

授權判斷唯一的資料來源。每次請求都重新查詢，
不快取，因為隊伍成員可能在兩次請求之間改變。
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from models import Role, User
from core.exceptions import UserNotFound
from services.team_directory import find_user_team


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: Role
    team_id: Optional[str]
    access_level: str = "general"

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def resolve_identity(db: Session, user_id: str) -> Identity:
    """
    解析使用者身分

    參數：
        db: SQLAlchemy Session
        user_id: 使用者 id

    返回：
        Identity（team_id 為 None 表示沒有隊伍）

    異常：
        UserNotFound: 使用者不存在
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFound(user_id)

    team = find_user_team(db, user.id)
    return Identity(
        user_id=user.id,
        role=user.role,
        team_id=team.id if team else None,
        access_level=user.access_level,
    )
