"""
Project Manager：隊伍資源的不變量

職責：
1. 建立專案（每個隊伍每個活動最多一個專案）
2. 報名獎項（集合插入，重複報名是 no-op）
3. 編輯 / 刪除 / 查詢專案

並發：
- 「查詢是否已有專案 -> 建立」是 read-then-write，兩個同時的請求都可能看到「沒有專案」
- 真正的保證是 projects 表上的 (team_id, event_id) 唯一約束
- flush 時違反約束：rollback 後重新查詢，(team, event) 已被佔用才轉成 DuplicateProject，
  呼叫者不需要區分是預先檢查擋下的還是競態擋下的；其他約束失敗是 Invalid

授權不在這裡處理：呼叫前必須先經過 core.authorizer
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging

from models import Prize, Project
from core.locks import with_project_lock
from core.exceptions import DuplicateProject, Invalid, PrizeNotFound, ProjectNotFound
from services.team_directory import find_team
from database import transactional

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "description", "url", "slides", "video")
REQUIRED_FIELDS = ("name",)


def find_team_project(db: Session, team_id: str, event_id: str) -> Optional[Project]:
    """以 (team, event) 查詢專案，沒有則返回 None"""
    return db.query(Project).filter(
        Project.team_id == team_id,
        Project.event_id == event_id
    ).first()


class ProjectManager:
    """專案生命週期管理器"""

    @staticmethod
    @transactional
    def create_project(db: Session, team_id: str, event_id: str, attrs: Dict) -> Project:
        """
        建立專案

        流程：
        1. 確認隊伍存在
        2. 預先檢查 (team, event) 是否已有專案
        3. 建立專案並 flush（唯一約束在這裡生效）

        參數：
            db: SQLAlchemy Session
            team_id: 擁有專案的隊伍
            event_id: 活動（由 API 層解析後明確傳入）
            attrs: name / description / url / slides / video

        返回：
            新建立的 Project

        異常：
            TeamNotFound: 隊伍不存在
            Invalid: 缺少專案名稱
            DuplicateProject: 隊伍在此活動已有專案（包含競態情況）
        """
        if not attrs.get("name"):
            raise Invalid("Project name is required.")

        find_team(db, team_id)

        if find_team_project(db, team_id, event_id):
            raise DuplicateProject(team_id, event_id)

        project = Project(
            team_id=team_id,
            event_id=event_id,
            **{field: attrs.get(field) for field in EDITABLE_FIELDS}
        )
        db.add(project)
        try:
            db.flush()
        except IntegrityError as e:
            db.rollback()
            # 只有 (team, event) 唯一約束才算重複，其他約束失敗是輸入錯誤
            if find_team_project(db, team_id, event_id):
                logger.warning(
                    f"Unique constraint rejected project for team {team_id} in event {event_id}"
                )
                raise DuplicateProject(team_id, event_id)
            raise Invalid(f"Project could not be created: {e.orig}")

        logger.info(f"Created project {project.id} for team {team_id} in event {event_id}")
        return project

    @staticmethod
    @transactional
    def enter_project_in_prize(db: Session, project_id: str, prize_id: str) -> Project:
        """
        把專案報名到獎項（冪等）

        重複報名同一個獎項是 no-op，不是錯誤。
        兩個請求同時報名時，後到的會撞到 project_prizes 的複合主鍵，
        這種情況同樣視為 no-op。

        異常：
            ProjectNotFound: 專案不存在
            PrizeNotFound: 獎項不存在
        """
        project = with_project_lock(project_id, db).first()
        if not project:
            raise ProjectNotFound(project_id)

        prize = db.query(Prize).filter(Prize.id == prize_id).first()
        if not prize:
            raise PrizeNotFound(prize_id)

        if prize in project.prizes:
            logger.info(f"Project {project_id} already entered in prize {prize_id}")
            return project

        project.prizes.append(prize)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.info(f"Concurrent entry of project {project_id} in prize {prize_id}")
            return ProjectManager.get_project(db, project_id)

        logger.info(f"Entered project {project_id} in prize {prize_id}")
        return project

    @staticmethod
    @transactional
    def edit_project(db: Session, project_id: str, updates: Dict) -> Project:
        """
        編輯專案的描述欄位

        team / event 不能透過編輯修改，否則會繞過唯一性與擁有權
        """
        project = with_project_lock(project_id, db).first()
        if not project:
            raise ProjectNotFound(project_id)

        for field in EDITABLE_FIELDS:
            if field not in updates:
                continue
            if field in REQUIRED_FIELDS and updates[field] is None:
                continue
            setattr(project, field, updates[field])

        logger.info(f"Edited project {project_id}: {sorted(updates)}")
        return project

    @staticmethod
    @transactional
    def delete_project(db: Session, project_id: str) -> None:
        """
        刪除專案

        不處理獎項 winner 的清理（由資料庫的 ON DELETE SET NULL 負責）
        """
        project = ProjectManager.get_project(db, project_id)
        db.delete(project)
        logger.info(f"Deleted project {project_id}")

    @staticmethod
    def get_project(db: Session, project_id: str) -> Project:
        project = db.query(Project).filter(Project.id == project_id).first()
        if not project:
            raise ProjectNotFound(project_id)
        return project

    @staticmethod
    def get_team_project(db: Session, team_id: str, event_id: str) -> Project:
        """
        取得隊伍在活動中的專案

        異常：
            ProjectNotFound: 隊伍沒有專案
        """
        project = find_team_project(db, team_id, event_id)
        if not project:
            raise ProjectNotFound(f"for team {team_id}")
        return project

    @staticmethod
    def list_projects(db: Session, event_id: Optional[str] = None) -> List[Project]:
        query = db.query(Project)
        if event_id is not None:
            query = query.filter(Project.event_id == event_id)
        return query.order_by(Project.created_at).all()
