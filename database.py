from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
from typing import List, Literal
import logging

from core.exceptions import HackathonException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./hackathon.db"
    event_name: str = "TartanHacks"

    # last_write_wins：已決定的使用者可以被覆寫
    # strict：只允許 pending -> admitted/rejected（同狀態重複套用為 no-op）
    admission_policy: Literal["last_write_wins", "strict"] = "last_write_wins"

    # 由低到高排列的 access tier
    access_levels: List[str] = ["general", "sponsor", "staff"]

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite 需要特殊設定：connect_args={"check_same_thread": False}
# 這允許多執行緒存取同一個 SQLite 連線（FastAPI 的多執行緒環境需要）
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：提供 Database Session

    使用 yield 確保 session 在請求結束後會被關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator：確保資料庫操作的原子性

    使用方式：
        @transactional
        def enter_prize(db: Session, project_id: str, prize_id: str):
            project = with_project_lock(project_id, db).first()
            project.prizes.append(db.get(Prize, prize_id))
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback（報名不會只寫入一半）
        - HackathonException（NotOwner、DuplicateProject…）記為 INFO，其他記為 ERROR
        - 異常會被重新拋出（讓上層處理）

    注意：
        - 第一個參數必須是 db: Session
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except HackathonException as e:
            # 業務規則拒絕，不是系統錯誤
            logger.info(f"Transaction rolled back in {func.__name__}: {e}")
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
