"""
FastAPI dependencies：把 process 共用的 store 注入 managers
"""
from fastapi import Depends

from core.report_archive import ReportArchive
from core.room_manager import RoomManager
from core.store import KeyValueStore, get_store
from database import get_settings


def get_room_manager(store: KeyValueStore = Depends(get_store)) -> RoomManager:
    return RoomManager(store, get_settings().room_ttl_seconds)


def get_report_archive(
    store: KeyValueStore = Depends(get_store),
    room_manager: RoomManager = Depends(get_room_manager),
) -> ReportArchive:
    return ReportArchive(store, room_manager, get_settings().report_ttl_seconds)
