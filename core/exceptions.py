"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理

每個異常都帶有一個 ErrorKind，API 層只看 kind 決定回應，
不需要知道異常的內部狀態
"""
import enum


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "NotFound"
    NOT_OWNER = "NotOwner"
    NO_TEAM = "NoTeam"
    DUPLICATE_PROJECT = "DuplicateProject"
    OUT_OF_WINDOW = "OutOfWindow"
    SELF_CHECK_IN_DISABLED = "SelfCheckInDisabled"
    INSUFFICIENT_ACCESS = "InsufficientAccess"
    INVALID = "Invalid"


class HackathonException(Exception):
    """所有業務異常的基類"""
    kind = ErrorKind.INVALID


# ============ NotFound ============

class NotFound(HackathonException):
    """引用的資源不存在"""
    kind = ErrorKind.NOT_FOUND
    resource = "Resource"

    def __init__(self, resource_id):
        self.resource_id = resource_id
        super().__init__(f"{self.resource} {resource_id} not found")


class UserNotFound(NotFound):
    resource = "User"


class TeamNotFound(NotFound):
    resource = "Team"


class ProjectNotFound(NotFound):
    resource = "Project"


class PrizeNotFound(NotFound):
    resource = "Prize"


class CheckInItemNotFound(NotFound):
    resource = "Check-in item"


# ============ 授權相關異常 ============

class NotOwner(HackathonException):
    """呼叫者不屬於擁有該資源的隊伍"""
    kind = ErrorKind.NOT_OWNER


class NoTeam(HackathonException):
    """需要隊伍的操作，但呼叫者沒有隊伍"""
    kind = ErrorKind.NO_TEAM


# ============ Project 相關異常 ============

class DuplicateProject(HackathonException):
    """同一隊伍在同一活動已經有專案了"""
    kind = ErrorKind.DUPLICATE_PROJECT

    def __init__(self, team_id, event_id):
        self.team_id = team_id
        self.event_id = event_id
        super().__init__(
            "You already have a project. Please edit or delete your existing project."
        )


# ============ Check-in 相關異常 ============

class OutOfWindow(HackathonException):
    """不在報到時間範圍內"""
    kind = ErrorKind.OUT_OF_WINDOW


class SelfCheckInDisabled(HackathonException):
    """此項目不開放自行報到"""
    kind = ErrorKind.SELF_CHECK_IN_DISABLED


class InsufficientAccess(HackathonException):
    """使用者的 access level 不足"""
    kind = ErrorKind.INSUFFICIENT_ACCESS


# ============ 輸入 / 狀態轉換異常 ============

class Invalid(HackathonException):
    """輸入不合法"""
    kind = ErrorKind.INVALID


class InvalidStateTransition(Invalid):
    """非法的狀態轉換（只在 strict admission policy 下發生）"""
    pass


# 拒絕原因 -> 異常類別，讓 Decision.raise_if_denied() 可以拋出對應的異常
EXCEPTION_BY_KIND = {
    ErrorKind.NOT_OWNER: NotOwner,
    ErrorKind.NO_TEAM: NoTeam,
    ErrorKind.OUT_OF_WINDOW: OutOfWindow,
    ErrorKind.SELF_CHECK_IN_DISABLED: SelfCheckInDisabled,
    ErrorKind.INSUFFICIENT_ACCESS: InsufficientAccess,
    ErrorKind.INVALID: Invalid,
}
