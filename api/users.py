"""
User API Endpoints

職責：
1. 註冊使用者
2. 查詢使用者（admin 可查所有人，participant 只能查自己）
3. 錄取 / 拒絕使用者（admin）
4. 查詢使用者的隊伍、專案與報到紀錄

「以 user id 定位」的 endpoint 一律先經過 resolve_subject()：
participant 在路徑上放別人的 id，解析出來的仍然是自己
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import Event
from schemas import (
    CheckInHistoryResponse,
    ProjectResponse,
    TeamResponse,
    UserCreate,
    UserResponse,
)
from api.common import get_caller, get_event
from core.authorizer import Operation, Target, require, resolve_subject
from core.checkin import CheckInManager
from core.exceptions import NoTeam
from core.identity import Identity
from core.project_manager import ProjectManager
from core.state_machine import AdmissionStateMachine
from services.team_directory import find_team, member_ids
from services.user_directory import get_user, list_users, register_user

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.post("", response_model=UserResponse)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """註冊新使用者（participant，狀態 pending）"""
    user = register_user(db, user_data.name, user_data.email)
    logger.info(f"Registered user {user.id}")
    return UserResponse.model_validate(user)


@router.get("", response_model=List[UserResponse])
def get_users(caller: Identity = Depends(get_caller), db: Session = Depends(get_db)):
    require(caller, Operation.LIST_USERS, Target.nothing())
    return [UserResponse.model_validate(user) for user in list_users(db)]


@router.get("/{user_id}", response_model=UserResponse)
def get_user_by_id(
    user_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    subject = resolve_subject(db, caller, user_id)
    require(caller, Operation.GET_USER, Target.user(subject))
    return UserResponse.model_validate(get_user(db, subject.user_id))


@router.post("/{user_id}/admit", response_model=UserResponse)
def admit_user(
    user_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """錄取使用者（admin）"""
    require(caller, Operation.ADMIT_USER, Target.nothing())
    user = AdmissionStateMachine.admit(db, user_id)
    return UserResponse.model_validate(user)


@router.post("/{user_id}/reject", response_model=UserResponse)
def reject_user(
    user_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """拒絕使用者（admin）"""
    require(caller, Operation.REJECT_USER, Target.nothing())
    user = AdmissionStateMachine.reject(db, user_id)
    return UserResponse.model_validate(user)


@router.get("/{user_id}/team", response_model=TeamResponse)
def get_user_team(
    user_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    取得使用者的隊伍

    異常：
        NoTeam: 使用者沒有隊伍
    """
    subject = resolve_subject(db, caller, user_id)
    if subject.team_id is None:
        raise NoTeam("User does not have a team!")

    require(caller, Operation.GET_TEAM, Target.team(subject.team_id))
    team = find_team(db, subject.team_id)
    return TeamResponse(id=team.id, name=team.name, member_ids=member_ids(team))


@router.get("/{user_id}/project", response_model=ProjectResponse)
def get_user_project(
    user_id: str,
    caller: Identity = Depends(get_caller),
    event: Event = Depends(get_event),
    db: Session = Depends(get_db)
):
    """取得使用者所屬隊伍在目前活動的專案"""
    subject = resolve_subject(db, caller, user_id)
    if subject.team_id is None:
        raise NoTeam("User does not have a team!")

    project = ProjectManager.get_team_project(db, subject.team_id, event.id)
    require(caller, Operation.GET_PROJECT, Target.project(project))
    return ProjectResponse.model_validate(project)


@router.get("/{user_id}/check-ins", response_model=CheckInHistoryResponse)
def get_user_check_ins(
    user_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """取得使用者的報到紀錄與總分"""
    subject = resolve_subject(db, caller, user_id)
    require(caller, Operation.GET_CHECKIN_HISTORY, Target.user(subject))

    records = CheckInManager.get_history(db, subject.user_id)
    return CheckInHistoryResponse(
        user_id=subject.user_id,
        total_points=sum(record.points for record in records),
        item_ids=[record.item_id for record in records],
    )
