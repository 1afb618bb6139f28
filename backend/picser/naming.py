"""
生成仓库内的文件路径：<folder>/<时间戳>-<随机串>.<扩展名>
"""
from __future__ import annotations

import random
import string
from datetime import datetime, timezone
from typing import Optional

SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
SUFFIX_LENGTH = 9
DEFAULT_EXTENSION = "jpg"


def clean_folder(folder: str) -> str:
    return (folder or "").strip().strip("/")


def file_extension(filename: str) -> str:
    """取最后一个点之后的部分；没有扩展名时用 jpg"""
    name = (filename or "").rsplit("/", 1)[-1]
    if "." not in name:
        return DEFAULT_EXTENSION
    return name.rsplit(".", 1)[1] or DEFAULT_EXTENSION


def format_timestamp(now: datetime) -> str:
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    return stamp.replace(":", "-").replace(".", "-")


def random_suffix(rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return "".join(rng.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))


def generate_path(
    filename: str,
    folder: str,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    # 不检查目标路径是否已存在，靠时间戳 + 随机串避免冲突
    now = now or datetime.now(timezone.utc)
    name = f"{format_timestamp(now)}-{random_suffix(rng)}.{file_extension(filename)}"
    prefix = clean_folder(folder)
    if not prefix:
        return name
    return f"{prefix}/{name}"
