"""
命名服務：生成 Room Code、Report ID 與 Participant ID

純計算邏輯，不涉及狀態轉換
"""
import random
import secrets
import string
import time
import uuid

# 排除容易混淆的字元：0 / O / 1 / I
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


def generate_room_code() -> str:
    """
    生成隨機的 6 位房間代碼

    範例：K7MPQ2, XYZ9AB

    注意：
    - 不檢查唯一性（由呼叫者負責）
    - 32^6 = 1,073,741,824 種可能，碰撞機率極低
    """
    return ''.join(random.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))


def normalize_room_code(code: str) -> str:
    return code.strip().upper()


def generate_report_id() -> str:
    """
    生成報告 ID

    格式：report_<毫秒時間戳>_<8 位隨機字元>
    前綴的時間戳讓 ID 大致可依建立時間排序，隨機後綴避免同一毫秒內的碰撞
    """
    millis = int(time.time() * 1000)
    suffix = ''.join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(8))
    return f"report_{millis}_{suffix}"


def generate_uuid() -> str:
    return str(uuid.uuid4())
