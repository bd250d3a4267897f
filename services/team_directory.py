"""
隊伍目錄：隊伍查詢與成員管理

維持「一個使用者最多屬於一個隊伍」的不變量，
授權層（core）假設這個不變量永遠成立。
"""
from typing import Optional

from sqlalchemy.orm import Session

from models import Team, User
from core.exceptions import Invalid, NoTeam, TeamNotFound, UserNotFound
from core.locks import with_user_lock
from database import transactional


def find_team(db: Session, team_id: str) -> Team:
    """
    透過 id 取得隊伍

    異常：
        TeamNotFound: 隊伍不存在
    """
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise TeamNotFound(team_id)
    return team


def find_user_team(db: Session, user_id: str) -> Optional[Team]:
    """取得使用者目前所屬的隊伍，沒有隊伍則返回 None"""
    return (
        db.query(Team)
        .join(User, User.team_id == Team.id)
        .filter(User.id == user_id)
        .first()
    )


@transactional
def create_team(db: Session, name: str, creator_id: str) -> Team:
    """
    建立隊伍，建立者自動成為成員

    異常：
        UserNotFound: 建立者不存在
        Invalid: 建立者已經有隊伍
    """
    creator = with_user_lock(creator_id, db).first()
    if not creator:
        raise UserNotFound(creator_id)
    if creator.team_id is not None:
        raise Invalid("You are already in a team. Leave it before creating a new one.")

    team = Team(name=name)
    db.add(team)
    db.flush()

    creator.team_id = team.id
    db.flush()
    return team


@transactional
def join_team(db: Session, team_id: str, user_id: str) -> Team:
    """
    加入隊伍

    異常：
        TeamNotFound / UserNotFound: 資源不存在
        Invalid: 使用者已經在其他隊伍
    """
    team = find_team(db, team_id)
    user = with_user_lock(user_id, db).first()
    if not user:
        raise UserNotFound(user_id)

    if user.team_id == team.id:
        return team
    if user.team_id is not None:
        raise Invalid("You are already in a team. Leave it before joining another one.")

    user.team_id = team.id
    db.flush()
    return team


@transactional
def leave_team(db: Session, user_id: str) -> None:
    """
    離開目前的隊伍

    異常：
        UserNotFound: 使用者不存在
        NoTeam: 使用者沒有隊伍
    """
    user = with_user_lock(user_id, db).first()
    if not user:
        raise UserNotFound(user_id)
    if user.team_id is None:
        raise NoTeam("User does not have a team!")

    user.team_id = None
    db.flush()


def member_ids(team: Team):
    return sorted(member.id for member in team.members)
