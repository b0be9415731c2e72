"""
Key-value store 抽象層

核心只依賴 KeyValueStore 介面（get / set-with-ttl / delete），
不知道背後是哪一種實作：
- MemoryKeyValueStore：單一 process 內的 dict，process 結束資料即消失
- SqlKeyValueStore：透過 SQLAlchemy 存進資料庫的外部 store

實作在應用啟動時依設定選定一次（build_store），之後每個請求共用同一個實例。

注意：
    store 不提供 compare-and-swap，也沒有 transaction 跨越「讀 -> 改 -> 寫」。
    兩個請求同時修改同一個房間時，後寫入者覆蓋前者（last-write-wins）。
"""
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import StoreUnavailable
from database import Base, create_db_engine, create_session_factory, get_settings
from models import StoreEntry, utcnow

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Store 介面：value 必須是可以 JSON 序列化的 dict / list"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def purge_expired(self) -> int:
        """刪除所有已過期的資料，返回刪除筆數"""
        ...


def _expiry(ttl_seconds: Optional[int]) -> Optional[float]:
    if ttl_seconds is None:
        return None
    return time.time() + ttl_seconds


class MemoryKeyValueStore(KeyValueStore):
    """
    Process 內的 store

    讀寫都經過 JSON 轉換，呼叫端拿到的永遠是副本，
    修改副本不會影響 store 內的資料。
    """

    def __init__(self):
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            raw, expires_at = entry
            if expires_at is not None and expires_at <= time.time():
                del self._data[key]
                return None
        return json.loads(raw)

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        raw = json.dumps(value)
        with self._lock:
            self._data[key] = (raw, _expiry(ttl_seconds))

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def purge_expired(self) -> int:
        now = time.time()
        with self._lock:
            expired = [
                key for key, (_, expires_at) in self._data.items()
                if expires_at is not None and expires_at <= now
            ]
            for key in expired:
                del self._data[key]
        return len(expired)


class SqlKeyValueStore(KeyValueStore):
    """
    以 SQLAlchemy table（kv_entries）實作的外部 store

    每個操作使用獨立的 Session，操作完成即 commit；
    任何 SQLAlchemyError 都轉成 StoreUnavailable 往上拋。
    """

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def _run(self, operation: str, key: str, func):
        db = self._session_factory()
        try:
            result = func(db)
            db.commit()
            return result
        except SQLAlchemyError as e:
            logger.error(f"Store {operation} failed for key {key}: {e}", exc_info=True)
            db.rollback()
            raise StoreUnavailable(f"Store {operation} failed for key {key}") from e
        finally:
            db.close()

    def get(self, key: str) -> Optional[Any]:
        def _get(db):
            entry = db.get(StoreEntry, key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= time.time():
                db.delete(entry)
                return None
            return entry.value

        raw = self._run("get", key, _get)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        raw = json.dumps(value)

        def _set(db):
            entry = db.get(StoreEntry, key)
            if entry is None:
                entry = StoreEntry(key=key)
                db.add(entry)
            entry.value = raw
            entry.expires_at = _expiry(ttl_seconds)
            entry.updated_at = utcnow()

        self._run("set", key, _set)

    def delete(self, key: str) -> None:
        def _delete(db):
            db.query(StoreEntry).filter(StoreEntry.key == key).delete()

        self._run("delete", key, _delete)

    def purge_expired(self) -> int:
        def _purge(db):
            return db.query(StoreEntry).filter(
                StoreEntry.expires_at.isnot(None),
                StoreEntry.expires_at <= time.time()
            ).delete(synchronize_session=False)

        return self._run("purge", "*", _purge)


def build_store(settings) -> KeyValueStore:
    """
    依設定建立 store（只在啟動時決定一次）

    參數：
        settings: Settings（store_backend / database_url）

    返回：
        KeyValueStore 實例

    異常：
        ValueError: store_backend 不是 "sql" 或 "memory"
    """
    backend = settings.store_backend.lower()
    if backend == "memory":
        logger.info("Using in-process memory store")
        return MemoryKeyValueStore()
    if backend == "sql":
        engine = create_db_engine(settings.database_url)
        Base.metadata.create_all(bind=engine)
        logger.info(f"Using SQL store at {engine.url.render_as_string(hide_password=True)}")
        return SqlKeyValueStore(create_session_factory(engine))
    raise ValueError(f"Unknown store backend: {settings.store_backend}")


@lru_cache()
def get_store() -> KeyValueStore:
    """
    FastAPI dependency：提供整個 process 共用的 store

    測試時以 app.dependency_overrides[get_store] 覆寫
    """
    return build_store(get_settings())
