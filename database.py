from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from pydantic_settings import BaseSettings
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)

SEVEN_DAYS = 7 * 24 * 60 * 60
ONE_YEAR = 365 * 24 * 60 * 60


class Settings(BaseSettings):
    database_url: str = "sqlite:///./planning_poker.db"
    # "sql"：外部 key-value store（SQLAlchemy）；"memory"：單一 process 內的 dict
    store_backend: str = "sql"
    room_ttl_seconds: int = SEVEN_DAYS
    report_ttl_seconds: int = ONE_YEAR
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


def create_db_engine(database_url: str):
    """
    建立 SQLAlchemy Engine

    SQLite 需要特殊設定：connect_args={"check_same_thread": False}
    這允許多執行緒存取同一個 SQLite 連線（FastAPI 的多執行緒環境需要）
    """
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        pool_pre_ping=True
    )


def create_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


Base = declarative_base()


def configure_logging(level: str = "INFO") -> None:
    """
    設定 console logging

    只在應用啟動時呼叫一次（main.py 的 lifespan）
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Logging configured at level {level.upper()}")
