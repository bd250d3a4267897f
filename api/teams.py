"""
Team API Endpoints

職責：
1. 建立隊伍（建立者自動加入）
2. 查詢隊伍（隊員或 admin）
3. admin 把使用者加入隊伍（參與者只能自己建立或離開隊伍）
4. 離開隊伍
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import MessageResponse, TeamCreate, TeamResponse
from api.common import get_caller
from core.authorizer import Operation, Target, require
from core.identity import Identity
from services.team_directory import (
    create_team,
    find_team,
    join_team,
    leave_team,
    member_ids,
)

router = APIRouter(prefix="/api/teams", tags=["teams"])
logger = logging.getLogger(__name__)


class MemberAdd(BaseModel):
    user_id: str


def _team_response(team) -> TeamResponse:
    return TeamResponse(id=team.id, name=team.name, member_ids=member_ids(team))


@router.post("", response_model=TeamResponse)
def create_new_team(
    team_data: TeamCreate,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    require(caller, Operation.CREATE_TEAM, Target.user(caller))
    team = create_team(db, team_data.name, caller.user_id)
    logger.info(f"User {caller.user_id} created team {team.id}")
    return _team_response(team)


@router.get("/{team_id}", response_model=TeamResponse)
def get_team(
    team_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    require(caller, Operation.GET_TEAM, Target.team(team_id))
    return _team_response(find_team(db, team_id))


@router.post("/{team_id}/members", response_model=TeamResponse)
def add_member(
    team_id: str,
    member: MemberAdd,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """把使用者加入隊伍（只有 admin）"""
    require(caller, Operation.ADD_TEAM_MEMBER, Target.team(team_id))
    team = join_team(db, team_id, member.user_id)
    logger.info(f"User {member.user_id} added to team {team_id} by {caller.user_id}")
    return _team_response(team)


@router.post("/leave", response_model=MessageResponse)
def leave_current_team(caller: Identity = Depends(get_caller), db: Session = Depends(get_db)):
    require(caller, Operation.LEAVE_TEAM, Target.user(caller))
    leave_team(db, caller.user_id)
    logger.info(f"User {caller.user_id} left team {caller.team_id}")
    return MessageResponse(message="Successfully left team.")
