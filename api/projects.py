"""
Project API Endpoints

所有業務規則在 ProjectManager，這裡只負責：
1. 解析呼叫者與目前活動
2. 經過 Ownership Authorizer
3. 轉換回應格式
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from database import get_db
from models import Event
from schemas import MessageResponse, ProjectCreate, ProjectResponse, ProjectUpdate
from api.common import get_caller, get_event
from core.authorizer import Operation, Target, require
from core.identity import Identity
from core.project_manager import ProjectManager

router = APIRouter(prefix="/api/projects", tags=["projects"])
logger = logging.getLogger(__name__)


@router.post("", response_model=ProjectResponse)
def create_new_project(
    project_data: ProjectCreate,
    caller: Identity = Depends(get_caller),
    event: Event = Depends(get_event),
    db: Session = Depends(get_db)
):
    """
    建立專案

    前置條件：
    - participant 必須有隊伍（NoTeam），且只能替自己的隊伍建立（NotOwner）
    - 隊伍在目前活動還沒有專案（DuplicateProject）
    """
    require(caller, Operation.CREATE_PROJECT, Target.team(project_data.team))

    project = ProjectManager.create_project(
        db,
        project_data.team,
        event.id,
        project_data.model_dump(exclude={"team"})
    )
    return ProjectResponse.model_validate(project)


@router.get("", response_model=List[ProjectResponse])
def get_all_projects(
    caller: Identity = Depends(get_caller),
    event: Event = Depends(get_event),
    db: Session = Depends(get_db)
):
    require(caller, Operation.LIST_PROJECTS, Target.nothing())
    return [
        ProjectResponse.model_validate(project)
        for project in ProjectManager.list_projects(db, event.id)
    ]


@router.get("/team/{team_id}", response_model=ProjectResponse)
def get_project_by_team_id(
    team_id: str,
    caller: Identity = Depends(get_caller),
    event: Event = Depends(get_event),
    db: Session = Depends(get_db)
):
    require(caller, Operation.GET_PROJECT, Target.team(team_id))
    project = ProjectManager.get_team_project(db, team_id, event.id)
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project_by_id(
    project_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    project = ProjectManager.get_project(db, project_id)
    require(caller, Operation.GET_PROJECT, Target.project(project))
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
def edit_project(
    project_id: str,
    updates: ProjectUpdate,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """編輯專案（隊員或 admin），未指定的欄位不變"""
    project = ProjectManager.get_project(db, project_id)
    require(caller, Operation.EDIT_PROJECT, Target.project(project))

    project = ProjectManager.edit_project(db, project_id, updates.model_dump(exclude_unset=True))
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    project = ProjectManager.get_project(db, project_id)
    require(caller, Operation.DELETE_PROJECT, Target.project(project))

    ProjectManager.delete_project(db, project_id)
    return MessageResponse(message="Successfully deleted project.")


@router.put("/{project_id}/prizes/{prize_id}", response_model=ProjectResponse)
def enter_project(
    project_id: str,
    prize_id: str,
    caller: Identity = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """
    把專案報名到獎項（冪等）

    重複呼叫返回相同結果，不會出錯
    """
    project = ProjectManager.get_project(db, project_id)
    require(caller, Operation.ENTER_PRIZE, Target.project(project))

    project = ProjectManager.enter_project_in_prize(db, project_id, prize_id)
    return ProjectResponse.model_validate(project)
