"""
上传历史：最近 50 条记录，新记录在最前。

供调用上传 API 的客户端使用（例如命令行或桌面前端在本地保存上传结果）：
上传成功后用 record_from_result 生成记录，再 append 到 KeyValueHistoryStore。
服务端路由不读写历史，也不校验它；读写失败时静默降级
（读失败返回空列表，写失败保持原列表不变）。
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from .schemas import HistoryRecord, UploadResult

logger = logging.getLogger(__name__)

STORAGE_KEY = "picser_upload_history"
HISTORY_LIMIT = 50


class KeyValueBackend(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryBackend(KeyValueBackend):
    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend(KeyValueBackend):
    """整个文件是一个 {key: value} 的 JSON 对象"""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except ValueError as e:
            # 文件损坏时当作空，下一次 set/remove 会整体覆盖
            logger.warning(f"Ignoring corrupt history file {self.path}: {e}")
            return {}
        return raw if isinstance(raw, dict) else {}

    def _dump(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


class HistoryStore(ABC):
    @abstractmethod
    def append(self, record: HistoryRecord, cap: int = HISTORY_LIMIT) -> list[HistoryRecord]:
        ...

    @abstractmethod
    def list(self) -> list[HistoryRecord]:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class KeyValueHistoryStore(HistoryStore):
    """所有记录序列化成一个 JSON 列表存在同一个 key 下，多个写入者之间后写覆盖先写"""

    def __init__(self, backend: KeyValueBackend, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key

    def list(self) -> list[HistoryRecord]:
        try:
            stored = self.backend.get(self.key)
        except Exception as e:
            logger.warning(f"Failed to read upload history: {e}")
            return []
        if not stored:
            return []
        try:
            raw = json.loads(stored)
            if not isinstance(raw, list):
                return []
            return [HistoryRecord.model_validate(item) for item in raw]
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"Ignoring unreadable upload history: {e}")
            return []

    def append(self, record: HistoryRecord, cap: int = HISTORY_LIMIT) -> list[HistoryRecord]:
        current = self.list()
        updated = [record, *current][:max(cap, 0)]
        payload = json.dumps([item.model_dump(by_alias=True) for item in updated], ensure_ascii=False)
        try:
            self.backend.set(self.key, payload)
        except Exception as e:
            logger.warning(f"Failed to save upload history: {e}")
            return current
        return updated

    def clear(self) -> None:
        try:
            self.backend.remove(self.key)
        except Exception as e:
            logger.warning(f"Failed to clear upload history: {e}")


def record_from_result(result: UploadResult, now: Optional[datetime] = None) -> HistoryRecord:
    now = now or datetime.now(timezone.utc)
    return HistoryRecord(
        id=str(int(now.timestamp() * 1000)),
        filename=result.filename,
        url=result.url,
        urls=result.urls,
        github_url=result.github_url,
        upload_date=now.isoformat(),
        size=result.size,
        type=result.type,
    )
