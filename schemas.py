"""
Pydantic Schemas：API 請求與回應格式
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from models import AdmissionStatus, Role


# ============ User ============

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    admission_status: AdmissionStatus
    access_level: str
    team_id: Optional[str] = None

    class Config:
        from_attributes = True


# ============ Team ============

class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class TeamResponse(BaseModel):
    id: str
    name: str
    member_ids: List[str]


# ============ Project ============

class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    team: str
    description: Optional[str] = None
    url: Optional[str] = None
    slides: Optional[str] = None
    video: Optional[str] = None


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    url: Optional[str] = None
    slides: Optional[str] = None
    video: Optional[str] = None


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    slides: Optional[str] = None
    video: Optional[str] = None
    team_id: str
    event_id: str
    prize_ids: List[str]

    class Config:
        from_attributes = True


# ============ Prize ============

class PrizeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    eligibility: Optional[str] = None
    provider: Optional[str] = None


class PrizeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    eligibility: Optional[str] = None
    provider: Optional[str] = None
    winner: Optional[str] = None


class PrizeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    eligibility: Optional[str] = None
    event_id: str
    provider_id: Optional[str] = None
    winner_id: Optional[str] = None

    class Config:
        from_attributes = True


# ============ Check-in ============

class CheckInItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: int = Field(..., alias="startTime")
    end_time: int = Field(..., alias="endTime")
    points: int = 0
    access_level: str = Field("general", alias="accessLevel")
    enable_self_check_in: bool = Field(False, alias="enableSelfCheckIn")

    class Config:
        populate_by_name = True


class CheckInItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: Optional[int] = Field(None, alias="startTime")
    end_time: Optional[int] = Field(None, alias="endTime")
    points: Optional[int] = None
    access_level: Optional[str] = Field(None, alias="accessLevel")
    enable_self_check_in: Optional[bool] = Field(None, alias="enableSelfCheckIn")

    class Config:
        populate_by_name = True


class CheckInItemResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    start_time: int
    end_time: int
    points: int
    access_level: str
    enable_self_check_in: bool

    class Config:
        from_attributes = True


class CheckInRequest(BaseModel):
    # 只有 admin 可以替其他使用者報到；participant 一律報到自己
    user_id: Optional[str] = None


class CheckInResponse(BaseModel):
    item_id: str
    user_id: str
    points: int
    created: bool


class CheckInHistoryResponse(BaseModel):
    user_id: str
    total_points: int
    item_ids: List[str]


# ============ Common ============

class MessageResponse(BaseModel):
    message: str
