"""
SQLAlchemy Models

資料表：
- events：活動（目前活動由 API 層每個請求解析一次）
- teams / users：隊伍與使用者（一個使用者最多屬於一個隊伍）
- projects：專案，(team_id, event_id) 唯一
- prizes / project_prizes：獎項與專案報名（集合語意，複合主鍵）
- checkin_items / checkin_records：報到項目與報到紀錄（集合語意，複合主鍵）
"""
import enum
import time
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    BigInteger,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """目前時間（epoch milliseconds），報到時間範圍使用同一單位"""
    return int(time.time() * 1000)


class Role(str, enum.Enum):
    ADMIN = "admin"
    PARTICIPANT = "participant"


class AdmissionStatus(str, enum.Enum):
    PENDING = "pending"
    ADMITTED = "admitted"
    REJECTED = "rejected"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Team(Base):
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship("User", back_populates="team")


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(Enum(Role), nullable=False, default=Role.PARTICIPANT)
    admission_status = Column(
        Enum(AdmissionStatus), nullable=False, default=AdmissionStatus.PENDING
    )
    access_level = Column(String(50), nullable=False, default="general")
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    team = relationship("Team", back_populates="members")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


project_prizes = Table(
    "project_prizes",
    Base.metadata,
    Column("project_id", String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("prize_id", String(36), ForeignKey("prizes.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        UniqueConstraint("team_id", "event_id", name="uq_project_team_event"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(1024), nullable=True)
    slides = Column(String(1024), nullable=True)
    video = Column(String(1024), nullable=True)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    team = relationship("Team")
    prizes = relationship(
        "Prize", secondary=project_prizes, back_populates="projects", lazy="selectin"
    )

    @property
    def prize_ids(self):
        return sorted(prize.id for prize in self.prizes)


class Prize(Base):
    __tablename__ = "prizes"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    eligibility = Column(Text, nullable=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=False)
    provider_id = Column(String(36), nullable=True)
    winner_id = Column(String(36), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    projects = relationship("Project", secondary=project_prizes, back_populates="prizes")


class CheckInItem(Base):
    __tablename__ = "checkin_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=False)
    points = Column(Integer, nullable=False, default=0)
    access_level = Column(String(50), nullable=False, default="general")
    enable_self_check_in = Column(Boolean, nullable=False, default=False)


class CheckInRecord(Base):
    __tablename__ = "checkin_records"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    item_id = Column(String(36), ForeignKey("checkin_items.id", ondelete="CASCADE"), primary_key=True)
    points = Column(Integer, nullable=False, default=0)
    checked_in_at = Column(BigInteger, nullable=False, default=now_ms)
    checked_in_by = Column(String(36), nullable=True)

    item = relationship("CheckInItem")
