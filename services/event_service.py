"""
活動服務：解析「目前活動」

API 層每個請求解析一次，之後以參數明確傳入 core，
core 裡面沒有任何全域的目前活動狀態。
"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Event
from database import get_settings


def get_current_event(db: Session, name: Optional[str] = None) -> Event:
    """
    取得目前活動，第一次查詢時自動建立

    參數：
        db: SQLAlchemy Session
        name: 活動名稱，不指定則使用 settings.event_name
    """
    name = name or get_settings().event_name

    event = db.query(Event).filter(Event.name == name).first()
    if event:
        return event

    event = Event(name=name)
    db.add(event)
    try:
        db.commit()
    except IntegrityError:
        # 另一個請求同時建立了同名活動
        db.rollback()
        return db.query(Event).filter(Event.name == name).one()

    db.refresh(event)
    return event
