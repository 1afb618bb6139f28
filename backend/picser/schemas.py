from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional


class UploadUrls(BaseModel):
    # 分支链接（分支前进后内容可能变化）
    github: str
    raw: str
    jsdelivr: str
    # commit 固定链接
    github_commit: str
    raw_commit: str
    jsdelivr_commit: str


class RepositoryTarget(BaseModel):
    owner: str
    repo: str
    branch: str
    folder: str


class UploadResult(BaseModel):
    success: bool = True
    message: str = "Image uploaded successfully"
    url: str
    urls: UploadUrls
    filename: str
    size: int
    type: str
    commit_sha: str
    github_url: Optional[str] = None
    repository: RepositoryTarget


class ConfigCheckRequest(BaseModel):
    github_token: Optional[str] = None
    github_owner: Optional[str] = None
    github_repo: Optional[str] = None
    github_branch: Optional[str] = None


class RepositoryInfo(BaseModel):
    name: str
    full_name: str
    private: bool = False
    default_branch: str = ""
    permissions: Optional[Dict[str, Any]] = None


class BranchInfo(BaseModel):
    name: str
    exists: bool
    note: str


class RateLimitHint(BaseModel):
    note: str = "Check your GitHub API rate limits"
    docs_url: str = "https://docs.github.com/en/rest/rate-limit"


class ConfigCheckResult(BaseModel):
    success: bool = True
    message: str = "GitHub configuration is valid"
    repository: RepositoryInfo
    branch: BranchInfo
    rate_limit: RateLimitHint = Field(default_factory=RateLimitHint)


class HistoryRecord(BaseModel):
    # 持久化格式沿用前端 localStorage 的字段名 uploadDate
    model_config = ConfigDict(populate_by_name=True)

    id: str
    filename: str
    url: str
    urls: Optional[UploadUrls] = None
    github_url: Optional[str] = None
    upload_date: str = Field(alias="uploadDate")
    size: int
    type: str
