"""
上传前的文件校验（只看客户端声明的类型，不做内容嗅探）
"""
from .errors import InvalidType, TooLarge

# 100 MiB
MAX_FILE_SIZE = 100 * 1024 * 1024


def validate_image(content_type: str, size: int) -> None:
    if not (content_type or "").startswith("image/"):
        raise InvalidType("Only image files are allowed")
    if size > MAX_FILE_SIZE:
        raise TooLarge("File size must be less than 100MB")
