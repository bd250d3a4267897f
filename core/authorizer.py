"""
Ownership Authorizer：決定呼叫者能不能對某個資源做某個操作

規則（依序判斷，第一個符合的規則決定結果）：
0. 前置條件：participant 建立專案必須有隊伍，否則 DENY(NoTeam)
1. admin -> ALLOW
2. 公開列表類的讀取操作 -> ALLOW
3. 資源所屬隊伍 == 呼叫者目前的隊伍 -> ALLOW
   （使用者自己的 user 紀錄也視為自己擁有）
4. 其他 -> DENY(NotOwner)

這是純函式，不查資料庫、不快取；每個操作都要重新判斷。
「以 user id 定位」的操作（我的隊伍、我的專案）先用 resolve_subject()
解析出真正的主體，再套規則 3。
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from models import Prize, Project
from core.exceptions import EXCEPTION_BY_KIND, ErrorKind
from core.identity import Identity, resolve_identity

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    # Users
    LIST_USERS = "list_users"
    GET_USER = "get_user"
    ADMIT_USER = "admit_user"
    REJECT_USER = "reject_user"
    # Teams
    GET_TEAM = "get_team"
    CREATE_TEAM = "create_team"
    ADD_TEAM_MEMBER = "add_team_member"
    LEAVE_TEAM = "leave_team"
    # Projects
    LIST_PROJECTS = "list_projects"
    GET_PROJECT = "get_project"
    CREATE_PROJECT = "create_project"
    EDIT_PROJECT = "edit_project"
    DELETE_PROJECT = "delete_project"
    ENTER_PRIZE = "enter_prize"
    # Prizes
    LIST_PRIZES = "list_prizes"
    GET_PRIZE = "get_prize"
    CREATE_PRIZE = "create_prize"
    EDIT_PRIZE = "edit_prize"
    DELETE_PRIZE = "delete_prize"
    # Check-in
    LIST_CHECKIN_ITEMS = "list_checkin_items"
    CREATE_CHECKIN_ITEM = "create_checkin_item"
    EDIT_CHECKIN_ITEM = "edit_checkin_item"
    CHECK_IN = "check_in"
    GET_CHECKIN_HISTORY = "get_checkin_history"


PUBLIC_LISTINGS = frozenset({
    Operation.LIST_PROJECTS,
    Operation.LIST_PRIZES,
    Operation.GET_PRIZE,
    Operation.LIST_CHECKIN_ITEMS,
})

# 隊伍擁有權決定專案擁有權，只有 admin 能替別人改變隊伍
ADMIN_ONLY = frozenset({
    Operation.ADD_TEAM_MEMBER,
})


@dataclass(frozen=True)
class Target:
    """
    操作的目標資源

    owner_team_id 為 None 表示資源不屬於任何隊伍（例如 prize、check-in item），
    這類資源只有 admin 或公開讀取能通過
    """
    kind: str
    id: Optional[str] = None
    owner_team_id: Optional[str] = None

    @classmethod
    def nothing(cls) -> "Target":
        return cls(kind="none")

    @classmethod
    def team(cls, team_id: Optional[str]) -> "Target":
        return cls(kind="team", id=team_id, owner_team_id=team_id)

    @classmethod
    def project(cls, project: Project) -> "Target":
        return cls(kind="project", id=project.id, owner_team_id=project.team_id)

    @classmethod
    def prize(cls, prize: Prize) -> "Target":
        return cls(kind="prize", id=prize.id)

    @classmethod
    def user(cls, identity: Identity) -> "Target":
        return cls(kind="user", id=identity.user_id, owner_team_id=identity.team_id)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: ErrorKind, message: str) -> "Decision":
        return cls(allowed=False, reason=reason, message=message)

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise EXCEPTION_BY_KIND[self.reason](self.message)


def authorize(caller: Identity, operation: Operation, target: Target) -> Decision:
    """
    判斷呼叫者能否執行操作

    參數：
        caller: 呼叫者身分（由 resolve_identity 取得）
        operation: 要執行的操作
        target: 目標資源

    返回：
        Decision（ALLOW 或 DENY + 原因）
    """
    # 0. 前置條件：participant 沒有隊伍不能建立專案（和 NotOwner 區分）
    if operation == Operation.CREATE_PROJECT and not caller.is_admin and caller.team_id is None:
        return Decision.deny(ErrorKind.NO_TEAM, "You must be in a team to create a project.")

    # 1. admin 不受擁有權限制
    if caller.is_admin:
        return Decision.allow()

    if operation in ADMIN_ONLY:
        return Decision.deny(
            ErrorKind.NOT_OWNER,
            f"Only admins may {operation.value.replace('_', ' ')}."
        )

    # 2. 公開列表
    if operation in PUBLIC_LISTINGS:
        return Decision.allow()

    # 3. 透過隊伍擁有
    if target.owner_team_id is not None and target.owner_team_id == caller.team_id:
        return Decision.allow()
    if target.kind == "user" and target.id == caller.user_id:
        return Decision.allow()

    # 4. 其他一律拒絕
    return Decision.deny(
        ErrorKind.NOT_OWNER,
        f"You are not allowed to {operation.value.replace('_', ' ')}."
    )


def require(caller: Identity, operation: Operation, target: Target) -> None:
    """authorize() 的便利版本：DENY 時直接拋出對應的異常"""
    decision = authorize(caller, operation, target)
    if not decision.allowed:
        logger.info(
            f"Denied {operation.value} on {target.kind} {target.id} "
            f"for user {caller.user_id}: {decision.reason.value}"
        )
    decision.raise_if_denied()


def resolve_subject(db: Session, caller: Identity, requested_user_id: str) -> Identity:
    """
    解析「以 user id 定位」的操作真正的主體

    - admin：可以查任何使用者，解析 requested_user_id
    - participant：一律解析成自己，路徑上偽造的 id 不會改變結果

    異常：
        UserNotFound: admin 查詢的使用者不存在
    """
    if caller.is_admin:
        return resolve_identity(db, requested_user_id)

    if requested_user_id != caller.user_id:
        logger.warning(
            f"User {caller.user_id} addressed user {requested_user_id}; "
            f"resolving against the caller instead"
        )
    # 重新解析，確保拿到最新的隊伍
    return resolve_identity(db, caller.user_id)
